# src/pkg_tokenauth/domain/value_objects.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .constants import KEY_SIZE
from .exceptions import InvalidKeyError


# --- Key material -----------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SymmetricKey:
    """
    Process-wide symmetric key.

    Validated once at construction; a wrong size is a configuration error,
    never a per-request one. The raw bytes are kept out of repr().
    """
    value: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.value, bytes):
            raise InvalidKeyError("symmetric key must be bytes")
        if len(self.value) != KEY_SIZE:
            raise InvalidKeyError(
                f"invalid key size: must be exactly {KEY_SIZE} bytes"
            )

    @classmethod
    def from_str(cls, raw: str) -> SymmetricKey:
        return cls(raw.encode("utf-8"))

    @classmethod
    def coerce(cls, raw: SymmetricKey | bytes | str) -> SymmetricKey:
        if isinstance(raw, SymmetricKey):
            return raw
        if isinstance(raw, str):
            return cls.from_str(raw)
        return cls(raw)

    def __repr__(self) -> str:
        return "SymmetricKey(<redacted>)"

    __str__ = __repr__


# --- Session metadata -------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ClientMetadata:
    """
    Who asked for the session. Stored for audit, never checked by renewal.
    """
    user_agent: Optional[str] = None
    client_ip: Optional[str] = None
