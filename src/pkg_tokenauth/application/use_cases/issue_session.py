from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta

from ...domain.entities import Session, SessionGrant
from ...domain.exceptions import SessionStoreError
from ...domain.ports import Clock, SessionStore, TokenMaker
from ...domain.value_objects import ClientMetadata

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class IssueSessionUseCase:
    """
    Mint an access/refresh token pair for an already-authenticated subject
    and persist the session that pairs with the refresh token.

    Credential checks (passwords etc.) happen before this, in the host app.
    """

    token_maker: TokenMaker
    session_store: SessionStore
    clock: Clock
    access_token_ttl: timedelta
    refresh_token_ttl: timedelta

    async def execute(
            self,
            subject: str,
            client: ClientMetadata | None = None,
    ) -> SessionGrant:
        """
        Raises:
            SessionStoreError if the session cannot be stored.
        """
        access = self.token_maker.create_token(subject, self.access_token_ttl)
        refresh = self.token_maker.create_token(subject, self.refresh_token_ttl)

        session = Session(
            id=refresh.payload.id,
            subject=subject,
            refresh_token=refresh.token,
            client=client or ClientMetadata(),
            is_blocked=False,
            expires_at=refresh.payload.expires_at,
            created_at=self.clock.now(),
        )

        try:
            await self.session_store.create_session(session)
        except SessionStoreError:
            raise
        except Exception as exc:
            raise SessionStoreError(f"cannot create session: {exc}") from exc

        logger.info("issued session %s for subject %r", session.id, subject)

        return SessionGrant(
            access_token=access.token,
            access_payload=access.payload,
            refresh_token=refresh.token,
            refresh_payload=refresh.payload,
            session=session,
            expires_in=int(self.access_token_ttl.total_seconds()),
        )
