from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from ..domain.exceptions import ConfigurationError
from ..domain.value_objects import SymmetricKey


@dataclass(slots=True)
class TokenSettings:
    """
    Token and session settings, fixed at process start.

    Host code decides how to construct this (env, config file, etc.).
    The key is checked here so a bad deployment fails before serving.
    """
    token_symmetric_key: str
    access_token_duration: timedelta = timedelta(minutes=15)
    refresh_token_duration: timedelta = timedelta(hours=24)

    # Hardening / infrastructure
    rotate_refresh_tokens: bool = False
    session_store_timeout: Optional[float] = None

    def __post_init__(self) -> None:
        SymmetricKey.coerce(self.token_symmetric_key)
        for name in ("access_token_duration", "refresh_token_duration"):
            if getattr(self, name) <= timedelta(0):
                raise ConfigurationError(f"{name} must be positive")
        if self.session_store_timeout is not None and self.session_store_timeout <= 0:
            raise ConfigurationError("session_store_timeout must be positive")

    def __repr__(self) -> str:
        return (
            "TokenSettings(token_symmetric_key=<redacted>, "
            f"access_token_duration={self.access_token_duration!r}, "
            f"refresh_token_duration={self.refresh_token_duration!r}, "
            f"rotate_refresh_tokens={self.rotate_refresh_tokens}, "
            f"session_store_timeout={self.session_store_timeout})"
        )
