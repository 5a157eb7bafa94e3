from __future__ import annotations

from typing import TYPE_CHECKING

from .constants import RejectionReason

if TYPE_CHECKING:
    from .entities import TokenPayload


class AuthenticationError(Exception):
    """Raised when a credential cannot be accepted."""
    pass


class InvalidTokenError(AuthenticationError):
    """Raised when token is malformed, tampered with or encrypted under another key."""

    def __init__(self, message: str = "token is invalid") -> None:
        super().__init__(message)


class TokenExpiredError(AuthenticationError):
    """
    Raised when token decrypts fine but is past its embedded expiry.

    The decoded payload is kept so callers can log who the token belonged to.
    """

    def __init__(self, message: str = "token has expired", *, payload: TokenPayload | None = None) -> None:
        super().__init__(message)
        self.payload = payload


class SessionNotFoundError(AuthenticationError):
    """Raised when a refresh token has no matching session."""

    def __init__(self, message: str = "session not found") -> None:
        super().__init__(message)


class SessionRejectedError(AuthenticationError):
    """
    Raised when a session exists but cannot be used for renewal.

    Every reason shares the same public message; `reason` is for logs only.
    """

    def __init__(self, reason: RejectionReason) -> None:
        super().__init__("unauthorized")
        self.reason = reason


class SessionStoreError(Exception):
    """Raised when the session store fails for infrastructure reasons."""
    pass


class ConfigurationError(Exception):
    """Raised on invalid startup configuration."""
    pass


class InvalidKeyError(ConfigurationError):
    """Raised when the symmetric key has the wrong size."""
    pass
