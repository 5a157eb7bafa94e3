from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Type

from graphql import GraphQLError
from starlette.requests import Request
from strawberry.permission import BasePermission
from strawberry.types import Info

from ...config.settings import TokenSettings
from ...domain.constants import AUTHORIZATION_HEADER_KEY
from ...domain.entities import TokenPayload
from ...domain.exceptions import AuthenticationError
from ...domain.ports import Clock, SessionStore
from ..common.auth_factory import AuthDependencies, create_auth_dependencies
from ..common.request_state import set_authorization_payload


# --------------------------------------------------------------------- #
# Context type used by Strawberry
# --------------------------------------------------------------------- #

@dataclass(slots=True)
class StrawberryAuthContext:
    """
    Default context type for Strawberry GraphQL.

    You can use this directly, or extend it in your app by adding more fields.
    """
    request: Request
    payload: Optional[TokenPayload] = None
    extra: Any = None  # host app can put UoW, services, etc. here if desired

    @property
    def username(self) -> Optional[str]:
        return self.payload.subject if self.payload else None


# --------------------------------------------------------------------- #
# Main integration: StrawberryAuth
# --------------------------------------------------------------------- #

@dataclass(slots=True)
class StrawberryAuth:
    """
    Strawberry GraphQL integration for pkg_tokenauth.

    Built on top of the framework-agnostic `AuthDependencies` facade.

    Responsibilities:
      - provide a `context_getter` for Strawberry's GraphQLRouter
      - provide a permission class you can attach to fields/mutations
    """

    auth: AuthDependencies

    # ----------------------------------------------------------------- #
    # Context getter
    # ----------------------------------------------------------------- #

    def make_context_getter(
        self,
        *,
        optional: bool = True,
        extra_factory: Optional[Callable[[Request, Optional[TokenPayload]], Any]] = None,
    ):
        """
        Build an async function compatible with:

            strawberry.fastapi.GraphQLRouter(context_getter=...)

        Args:
            optional:
                - True:   auth errors become `payload=None` in context
                - False:  auth errors become GraphQL errors
            extra_factory:
                - Optional callable: (request, payload | None) -> Any
                - Whatever it returns will be stored on context.extra

        Returns:
            async function(request: Request) -> StrawberryAuthContext
        """

        def _build(request: Request, payload: Optional[TokenPayload]) -> StrawberryAuthContext:
            extra = extra_factory(request, payload) if extra_factory else None
            return StrawberryAuthContext(request=request, payload=payload, extra=extra)

        async def _context_getter(request: Request) -> StrawberryAuthContext:
            header = request.headers.get(AUTHORIZATION_HEADER_KEY)

            if not header and optional:
                return _build(request, None)

            try:
                payload = self.auth.authenticate(header)
            except AuthenticationError as exc:
                if optional:
                    return _build(request, None)
                raise GraphQLError(str(exc)) from exc

            set_authorization_payload(request.scope, payload)
            return _build(request, payload)

        return _context_getter

    # ----------------------------------------------------------------- #
    # Permission helpers
    # ----------------------------------------------------------------- #

    def require_authenticated(self) -> Type[BasePermission]:
        """
        Permission: request carried a valid access token (context.payload is set).

        Example:

            IsAuthenticated = strawberry_auth.require_authenticated()

            @strawberry.field(permission_classes=[IsAuthenticated])
            def me(self, info: Info) -> str:
                return info.context.username
        """

        class _RequireAuthenticated(BasePermission):
            message = "Authentication required"

            def has_permission(self, source: Any, info: Info, **kwargs: Any) -> bool:
                ctx: StrawberryAuthContext = info.context
                return ctx.payload is not None

        return _RequireAuthenticated


# --------------------------------------------------------------------- #
# High-level helper
# --------------------------------------------------------------------- #

def create_strawberry_auth(
    *,
    settings: TokenSettings,
    session_store: SessionStore,
    clock: Clock | None = None,
) -> StrawberryAuth:
    """
    Convenience helper:

        strawberry_auth = create_strawberry_auth(
            settings=settings_from_env(),
            session_store=my_store,
        )

    This:
      - builds an EncryptedTokenMaker from the symmetric key
      - wires the gate + renewal use cases
      - wraps them in a StrawberryAuth helper
    """
    auth_deps: AuthDependencies = create_auth_dependencies(
        settings=settings,
        session_store=session_store,
        clock=clock,
    )
    return StrawberryAuth(auth=auth_deps)
