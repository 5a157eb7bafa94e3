from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status

from .routes import create_token_router
from .security import UNAUTHORIZED_HEADERS, authorization_header_scheme, set_authorization_payload
from ..common.auth_factory import AuthDependencies
from ...domain.entities import TokenPayload
from ...domain.exceptions import AuthenticationError


@dataclass(slots=True)
class FastAPIAuthorization:
    """
    FastAPI integration for pkg_tokenauth, built on top of the
    framework-agnostic AuthDependencies facade.

    Per-route gating goes through these dependencies; whole-app gating
    goes through AuthGateMiddleware. Both put the payload in request state.
    """

    auth: AuthDependencies

    # ------------------------------------------------------------------ #
    # Base dependencies
    # ------------------------------------------------------------------ #

    async def get_current_payload(
            self,
            request: Request,
            authorization: Optional[str] = Depends(authorization_header_scheme),
    ) -> TokenPayload:
        """Dependency: Require a valid access token."""
        try:
            payload = self.auth.authenticate(authorization)
        except AuthenticationError as exc:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=str(exc),
                headers=UNAUTHORIZED_HEADERS,
            ) from exc

        set_authorization_payload(request.scope, payload)
        return payload

    async def get_optional_payload(
            self,
            request: Request,
            authorization: Optional[str] = Depends(authorization_header_scheme),
    ) -> TokenPayload | None:
        """Dependency: Optional authentication."""
        if not authorization:
            return None

        try:
            payload = self.auth.authenticate(authorization)
        except AuthenticationError:
            # bad token -> treat as anonymous
            return None

        set_authorization_payload(request.scope, payload)
        return payload

    # ------------------------------------------------------------------ #
    # Routes
    # ------------------------------------------------------------------ #

    def token_router(self, *, prefix: str = "/tokens") -> APIRouter:
        """Router exposing POST {prefix}/renew."""
        return create_token_router(self.auth, prefix=prefix)


"""

from pkg_tokenauth.adapters.memory.session_store import InMemorySessionStore
from pkg_tokenauth.config import settings_from_env
from pkg_tokenauth.integrations.fastapi import create_fastapi_auth

fastapi_auth = create_fastapi_auth(
    settings=settings_from_env(),
    session_store=InMemorySessionStore(),  # your own store in production
)

app.include_router(fastapi_auth.token_router())

@app.get("/users/me")
async def me(payload: TokenPayload = Depends(fastapi_auth.get_current_payload)):
    return {"username": payload.subject}

"""
