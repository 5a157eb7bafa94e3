from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Mapping

from .value_objects import ClientMetadata


@dataclass(frozen=True, slots=True)
class TokenPayload:
    """
    Data carried inside a token.

    Created once at issuance and never mutated. `id` doubles as the key of
    the session paired with a refresh token.
    """
    id: uuid.UUID
    subject: str
    issued_at: datetime
    expires_at: datetime

    @classmethod
    def new(cls, subject: str, ttl: timedelta, now: datetime) -> TokenPayload:
        if not subject:
            raise ValueError("token subject must not be empty")
        if ttl <= timedelta(0):
            raise ValueError("token duration must be positive")
        return cls(
            id=uuid.uuid4(),
            subject=subject,
            issued_at=now,
            expires_at=now + ttl,
        )

    # ---- validity ----------------------------------------------------------

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def is_live(self, now: datetime) -> bool:
        return not self.is_expired(now)

    def expires_in(self, now: datetime) -> int:
        """Remaining lifetime in whole seconds, zero once expired."""
        return max(0, int((self.expires_at - now).total_seconds()))

    # ---- claims mapping ----------------------------------------------------

    def to_claims(self) -> dict[str, Any]:
        return {
            "jti": str(self.id),
            "sub": self.subject,
            "issued_at": self.issued_at.isoformat(),
            "expired_at": self.expires_at.isoformat(),
        }

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any]) -> TokenPayload:
        """
        Rebuild a payload from decoded claims.

        Raises KeyError, TypeError or ValueError when the claims are not shaped
        like the ones `to_claims` produces.
        """
        token_id = claims["jti"]
        if not isinstance(token_id, str):
            raise TypeError("invalid token id claim")

        subject = claims["sub"]
        if not isinstance(subject, str) or not subject:
            raise ValueError("invalid subject claim")

        issued_at = datetime.fromisoformat(claims["issued_at"])
        expires_at = datetime.fromisoformat(claims["expired_at"])
        if issued_at.tzinfo is None or expires_at.tzinfo is None:
            raise ValueError("naive timestamp in claims")

        return cls(
            id=uuid.UUID(token_id),
            subject=subject,
            issued_at=issued_at,
            expires_at=expires_at,
        )


@dataclass(frozen=True, slots=True)
class IssuedToken:
    """Wire text of a fresh token together with what it carries."""
    token: str
    payload: TokenPayload


@dataclass(frozen=True, slots=True)
class Session:
    """
    Refresh session as stored by the host application.

    `id` equals the id of the refresh token payload that created it. The
    session, not the token, is authoritative at renewal time.
    """
    id: uuid.UUID
    subject: str
    refresh_token: str
    expires_at: datetime
    created_at: datetime
    is_blocked: bool = False
    client: ClientMetadata = field(default_factory=ClientMetadata)

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def __repr__(self) -> str:
        return (
            f"Session(id={self.id!s}, subject={self.subject!r}, "
            f"is_blocked={self.is_blocked}, expires_at={self.expires_at.isoformat()})"
        )


@dataclass(frozen=True, slots=True)
class SessionGrant:
    """Token pair handed out on login/registration."""
    access_token: str
    access_payload: TokenPayload
    refresh_token: str
    refresh_payload: TokenPayload
    session: Session
    expires_in: int


@dataclass(frozen=True, slots=True)
class RenewedAccessToken:
    """Result of a successful renewal."""
    access_token: str
    access_payload: TokenPayload
    refresh_token: str
    subject: str
    expires_in: int
