from __future__ import annotations

from .deps import FastAPIAuthorization
from .middleware import AuthGateMiddleware
from .routes import RenewAccessTokenRequest, RenewAccessTokenResponse, create_token_router
from .security import get_authorization_payload, require_authorization_payload
from ..common.auth_factory import create_auth_dependencies, AuthDependencies
from ...config.settings import TokenSettings
from ...domain.ports import Clock, SessionStore


def create_fastapi_auth(
    *,
    settings: TokenSettings,
    session_store: SessionStore,
    clock: Clock | None = None,
) -> FastAPIAuthorization:
    """
    High-level helper for FastAPI apps:

    - Creates AuthDependencies from token settings and the app's session store
    - Wraps them in FastAPIAuthorization, exposing:

        fastapi_auth.get_current_payload
        fastapi_auth.get_optional_payload
        fastapi_auth.token_router()
        fastapi_auth.auth   (for AuthGateMiddleware)
    """
    auth: AuthDependencies = create_auth_dependencies(
        settings=settings,
        session_store=session_store,
        clock=clock,
    )
    return FastAPIAuthorization(auth=auth)


__all__ = [
    "AuthGateMiddleware",
    "FastAPIAuthorization",
    "RenewAccessTokenRequest",
    "RenewAccessTokenResponse",
    "create_fastapi_auth",
    "create_token_router",
    "get_authorization_payload",
    "require_authorization_payload",
]
