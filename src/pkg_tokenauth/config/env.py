from __future__ import annotations

import os
import re
from datetime import timedelta
from typing import Optional

from ..domain.exceptions import ConfigurationError
from .settings import TokenSettings

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")
_UNIT_SECONDS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def parse_duration(raw: str) -> timedelta:
    """
    Parse "15m", "24h", "1h30m", "90s", "500ms" or a plain number of seconds.
    """
    text = raw.strip()
    if not text:
        raise ConfigurationError("empty duration")

    try:
        return timedelta(seconds=float(text))
    except (ValueError, OverflowError):
        pass

    parts = _DURATION_PART.findall(text)
    if not parts or "".join(n + u for n, u in parts) != text:
        raise ConfigurationError(f"invalid duration: {raw!r}")

    try:
        return timedelta(seconds=sum(float(n) * _UNIT_SECONDS[u] for n, u in parts))
    except OverflowError as exc:
        raise ConfigurationError(f"duration out of range: {raw!r}") from exc


def settings_from_env() -> TokenSettings:
    def _bool(key: str, default: bool = False) -> bool:
        raw = os.getenv(key)
        if raw is None:
            return default
        return str(raw).strip().lower() in {"1", "true", "yes", "on"}

    def _duration(key: str, default: timedelta) -> timedelta:
        raw = os.getenv(key)
        if not raw:
            return default
        return parse_duration(raw)

    def _float(key: str) -> Optional[float]:
        raw = os.getenv(key)
        if not raw:
            return None
        try:
            return float(raw)
        except ValueError as exc:
            raise ConfigurationError(f"{key} must be a number of seconds") from exc

    key = os.getenv("TOKEN_SYMMETRIC_KEY")
    if not key:
        raise ConfigurationError("Missing token settings: TOKEN_SYMMETRIC_KEY")

    return TokenSettings(
        token_symmetric_key=key,
        access_token_duration=_duration("ACCESS_TOKEN_DURATION", timedelta(minutes=15)),
        refresh_token_duration=_duration("REFRESH_TOKEN_DURATION", timedelta(hours=24)),
        rotate_refresh_tokens=_bool("ROTATE_REFRESH_TOKENS"),
        session_store_timeout=_float("SESSION_STORE_TIMEOUT"),
    )
