from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Optional

from ...domain.constants import AUTHORIZATION_PAYLOAD_KEY
from ...domain.entities import TokenPayload


def set_authorization_payload(scope: MutableMapping[str, Any], payload: TokenPayload) -> None:
    """Attach a verified payload to the request state of an ASGI scope."""
    scope.setdefault("state", {})[AUTHORIZATION_PAYLOAD_KEY] = payload


def get_authorization_payload_from_scope(scope: Mapping[str, Any]) -> Optional[TokenPayload]:
    return (scope.get("state") or {}).get(AUTHORIZATION_PAYLOAD_KEY)
