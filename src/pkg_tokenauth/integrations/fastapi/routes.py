from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from ..common.auth_factory import AuthDependencies
from ...domain.exceptions import (
    AuthenticationError,
    SessionNotFoundError,
    SessionStoreError,
)

logger = logging.getLogger(__name__)


class RenewAccessTokenRequest(BaseModel):
    # presence is checked in the handler so a missing token is a 400, not a 422
    refresh_token: Optional[str] = None


class RenewAccessTokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    username: str
    expires_in: int


def create_token_router(auth: AuthDependencies, *, prefix: str = "/tokens") -> APIRouter:
    """
    Build the renewal router.

    Status mapping:
      - empty/missing refresh_token          -> 400 (protocol never runs)
      - refresh_token of the wrong type      -> 422 (request validation)
      - invalid/expired token, rejected session -> 401
      - no session for the token             -> 404
      - session store failure                -> 500
    """
    router = APIRouter(prefix=prefix, tags=["tokens"])

    @router.post("/renew", response_model=RenewAccessTokenResponse)
    async def renew_access_token(body: RenewAccessTokenRequest) -> RenewAccessTokenResponse:
        if not body.refresh_token:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="refresh_token is required",
            )

        try:
            renewed = await auth.renew(body.refresh_token)
        except SessionNotFoundError as exc:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=str(exc),
            ) from exc
        except AuthenticationError as exc:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=str(exc),
            ) from exc
        except SessionStoreError as exc:
            logger.error("token renewal failed: session store unavailable")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="internal error",
            ) from exc

        return RenewAccessTokenResponse(
            access_token=renewed.access_token,
            refresh_token=renewed.refresh_token,
            username=renewed.subject,
            expires_in=renewed.expires_in,
        )

    return router
