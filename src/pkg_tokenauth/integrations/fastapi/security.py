from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, Request, status
from fastapi.security import APIKeyHeader

from ..common.request_state import (
    get_authorization_payload_from_scope,
    set_authorization_payload,
)
from ...domain.entities import TokenPayload

# Raw "Authorization" header, exposed so it shows up as a security scheme in OpenAPI.
# The value is parsed by the gate use case, not by FastAPI.
authorization_header_scheme = APIKeyHeader(
    name="Authorization",
    scheme_name="BearerToken",
    description="bearer <access token>",
    auto_error=False,
)

UNAUTHORIZED_HEADERS = {"WWW-Authenticate": "Bearer"}


def get_authorization_payload(request: Request) -> Optional[TokenPayload]:
    """
    Payload stored by AuthGateMiddleware or FastAPIAuthorization, if any.
    """
    return get_authorization_payload_from_scope(request.scope)


def require_authorization_payload(request: Request) -> TokenPayload:
    """
    Dependency for routes behind AuthGateMiddleware.

    Raises HTTPException(401) if the gate did not run for this request.
    """
    payload = get_authorization_payload(request)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers=UNAUTHORIZED_HEADERS,
        )
    return payload


__all__ = [
    "UNAUTHORIZED_HEADERS",
    "authorization_header_scheme",
    "get_authorization_payload",
    "require_authorization_payload",
    "set_authorization_payload",
]
