from __future__ import annotations

import uuid
from datetime import datetime, timedelta
from typing import Optional, Protocol

from .entities import IssuedToken, Session, TokenPayload


class Clock(Protocol):
    """Port for the current time. Must return timezone-aware UTC datetimes."""

    def now(self) -> datetime:
        ...


class TokenMaker(Protocol):
    """
    Port for issuing and verifying tokens.

    Implementations live in the adapters layer (e.g. the encrypted token maker).
    """

    def create_token(self, subject: str, ttl: timedelta) -> IssuedToken:
        """
        Issue a token for `subject` that lives for `ttl`.

        The returned payload lets callers pair a session with the token
        without decoding it again.
        """
        ...

    def verify_token(self, token: str) -> TokenPayload:
        """
        Decrypt, authenticate and check expiry of the given token.

        Raises:
          - InvalidTokenError for anything structurally or cryptographically wrong
          - TokenExpiredError when the token is valid but past its expiry
        """
        ...


class SessionStore(Protocol):
    """
    Port for the durable refresh-session store owned by the host application.

    Renewal only reads. Writes are used by session issuance and by the
    optional refresh-token rotation.
    """

    async def get_session_by_id(self, session_id: uuid.UUID) -> Optional[Session]:
        """
        Return the session or None when it does not exist.

        Raises SessionStoreError on infrastructure failure.
        """
        ...

    async def create_session(self, session: Session) -> None:
        ...

    async def block_session(self, session_id: uuid.UUID) -> bool:
        """
        Block a session if it is still unblocked (compare-and-set).

        Returns True only for the call that flipped it; False when the
        session does not exist or was already blocked.
        """
        ...
