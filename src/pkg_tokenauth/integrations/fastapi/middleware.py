from __future__ import annotations

import logging
from typing import Iterable

from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from ...domain.constants import AUTHORIZATION_HEADER_KEY
from ...domain.exceptions import AuthenticationError
from ..common.auth_factory import AuthDependencies
from .security import UNAUTHORIZED_HEADERS, set_authorization_payload

logger = logging.getLogger(__name__)


class AuthGateMiddleware:
    """
    Pure ASGI middleware gating every HTTP request behind an access token.

    On success the payload is stored in the request state (see
    `get_authorization_payload`); on failure a 401 JSON response is sent
    and the wrapped app never runs.

        app.add_middleware(
            AuthGateMiddleware,
            auth=auth_deps,
            exclude_paths=["/tokens/renew", "/docs", "/openapi.json"],
        )

    `exclude_paths` match exactly or as a path prefix ("/public" also
    covers "/public/x").
    """

    def __init__(
        self,
        app: ASGIApp,
        auth: AuthDependencies,
        exclude_paths: Iterable[str] = (),
    ) -> None:
        self.app = app
        self.auth = auth
        self.exclude_paths = tuple(p.rstrip("/") or "/" for p in exclude_paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or self._is_excluded(scope["path"]):
            await self.app(scope, receive, send)
            return

        header = Headers(scope=scope).get(AUTHORIZATION_HEADER_KEY)
        try:
            payload = self.auth.authenticate(header)
        except AuthenticationError as exc:
            logger.debug("gate rejected %s %s: %s", scope.get("method"), scope["path"], exc)
            response = JSONResponse(
                {"detail": str(exc)},
                status_code=401,
                headers=UNAUTHORIZED_HEADERS,
            )
            await response(scope, receive, send)
            return

        set_authorization_payload(scope, payload)
        await self.app(scope, receive, send)

    def _is_excluded(self, path: str) -> bool:
        for prefix in self.exclude_paths:
            if prefix == "/" or path == prefix or path.startswith(prefix + "/"):
                return True
        return False
