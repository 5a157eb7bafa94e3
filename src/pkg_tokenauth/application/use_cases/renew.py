from __future__ import annotations

import asyncio
import hmac
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from ...domain.constants import RejectionReason
from ...domain.entities import RenewedAccessToken, Session, TokenPayload
from ...domain.exceptions import (
    ConfigurationError,
    SessionNotFoundError,
    SessionRejectedError,
    SessionStoreError,
)
from ...domain.ports import Clock, SessionStore, TokenMaker
from .issue_session import IssueSessionUseCase

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RenewAccessTokenUseCase:
    """
    Application use case: exchange a refresh token for a new access token.

    Checks run in a fixed order and the first failure ends the renewal:
      1) the refresh token itself (signature, format, embedded expiry)
      2) the session it points to exists
      3) session subject matches the token subject
      4) session is not blocked
      5) session stores exactly this refresh token
      6) session is not expired
    then a new access token is issued for the session subject.

    Nothing is written to the store unless `rotate_refresh_tokens` is on.
    With rotation a replacement session is created and the old one is then
    blocked; a concurrent rotation that loses the block is rejected.
    """

    token_maker: TokenMaker
    session_store: SessionStore
    clock: Clock
    access_token_ttl: timedelta
    issue_session: Optional[IssueSessionUseCase] = None
    rotate_refresh_tokens: bool = False
    store_timeout: Optional[float] = None  # seconds, for each store call

    def __post_init__(self) -> None:
        if self.rotate_refresh_tokens and self.issue_session is None:
            raise ConfigurationError("refresh token rotation requires an IssueSessionUseCase")

    async def execute(self, refresh_token: str) -> RenewedAccessToken:
        """
        Raises:
            InvalidTokenError
            TokenExpiredError
            SessionNotFoundError
            SessionRejectedError
            SessionStoreError
        """
        payload = self.token_maker.verify_token(refresh_token)

        session = await self._load_session(payload)
        self._check_session(payload, session, refresh_token)

        if self.rotate_refresh_tokens:
            return await self._rotate(session)

        access = self.token_maker.create_token(session.subject, self.access_token_ttl)
        logger.debug("renewed access token for session %s", session.id)

        return RenewedAccessToken(
            access_token=access.token,
            access_payload=access.payload,
            refresh_token=refresh_token,
            subject=session.subject,
            expires_in=int(self.access_token_ttl.total_seconds()),
        )

    # ------------------------------------------------------------------ #
    # Internal: store access
    # ------------------------------------------------------------------ #

    async def _call_store(self, coro):
        try:
            if self.store_timeout is None:
                return await coro
            return await asyncio.wait_for(coro, timeout=self.store_timeout)
        except SessionStoreError:
            logger.warning("session store failure", exc_info=True)
            raise
        except asyncio.TimeoutError as exc:
            logger.warning("session store timed out after %ss", self.store_timeout)
            raise SessionStoreError("session store timed out") from exc
        except Exception as exc:
            logger.exception("unexpected session store error")
            raise SessionStoreError(f"session store failed: {exc}") from exc

    async def _load_session(self, payload: TokenPayload) -> Session:
        session = await self._call_store(self.session_store.get_session_by_id(payload.id))
        if session is None:
            logger.info("no session for refresh token %s", payload.id)
            raise SessionNotFoundError()
        return session

    # ------------------------------------------------------------------ #
    # Internal: session gauntlet
    # ------------------------------------------------------------------ #

    def _check_session(self, payload: TokenPayload, session: Session, refresh_token: str) -> None:
        if payload.subject != session.subject:
            self._reject(session, RejectionReason.SUBJECT_MISMATCH)

        if session.is_blocked:
            self._reject(session, RejectionReason.BLOCKED)

        if not hmac.compare_digest(
            session.refresh_token.encode("utf-8"),
            refresh_token.encode("utf-8"),
        ):
            self._reject(session, RejectionReason.TOKEN_MISMATCH)

        if session.is_expired(self.clock.now()):
            self._reject(session, RejectionReason.SESSION_EXPIRED)

    @staticmethod
    def _reject(session: Session, reason: RejectionReason) -> None:
        logger.info("refresh rejected for session %s: %s", session.id, reason.value)
        raise SessionRejectedError(reason)

    # ------------------------------------------------------------------ #
    # Internal: rotation
    # ------------------------------------------------------------------ #

    async def _rotate(self, session: Session) -> RenewedAccessToken:
        # new session first: a failed write leaves the old refresh token usable for a retry
        grant = await self._call_store(
            self.issue_session.execute(session.subject, session.client)
        )

        # only one concurrent rotation can flip the old session
        superseded = await self._call_store(self.session_store.block_session(session.id))
        if not superseded:
            await self._call_store(self.session_store.block_session(grant.session.id))
            self._reject(session, RejectionReason.BLOCKED)

        logger.info("rotated session %s -> %s", session.id, grant.session.id)

        return RenewedAccessToken(
            access_token=grant.access_token,
            access_payload=grant.access_payload,
            refresh_token=grant.refresh_token,
            subject=session.subject,
            expires_in=grant.expires_in,
        )
