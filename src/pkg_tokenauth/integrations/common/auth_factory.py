from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ...adapters.clock import SystemClock
from ...adapters.crypto.encrypted_token_maker import EncryptedTokenMaker
from ...application.use_cases.authenticate import AuthenticateTokenUseCase
from ...application.use_cases.issue_session import IssueSessionUseCase
from ...application.use_cases.renew import RenewAccessTokenUseCase
from ...config.settings import TokenSettings
from ...domain.entities import RenewedAccessToken, SessionGrant, TokenPayload
from ...domain.ports import Clock, SessionStore, TokenMaker
from ...domain.value_objects import ClientMetadata


@dataclass(slots=True)
class AuthDependencies:
    """
    Framework-agnostic auth facade.

    Integrations (FastAPI, Strawberry, etc.) adapt this to their own
    dependency / middleware systems.
    """

    auth_use_case: AuthenticateTokenUseCase
    renew_use_case: RenewAccessTokenUseCase
    issue_use_case: IssueSessionUseCase

    # --- Core operations --------------------------------------------------

    def authenticate(self, authorization_header: Optional[str]) -> TokenPayload:
        """Authorization header value -> TokenPayload (or raise auth exceptions)."""
        return self.auth_use_case.execute(authorization_header)

    async def renew(self, refresh_token: str) -> RenewedAccessToken:
        """Refresh token -> new access token (or raise auth/store exceptions)."""
        return await self.renew_use_case.execute(refresh_token)

    async def issue_session(
            self,
            subject: str,
            client: ClientMetadata | None = None,
    ) -> SessionGrant:
        """Start a session for a subject whose credentials were already checked."""
        return await self.issue_use_case.execute(subject, client)

    @property
    def token_maker(self) -> TokenMaker:
        return self.auth_use_case.token_maker


def create_auth_dependencies(
        *,
        settings: TokenSettings,
        session_store: SessionStore,
        clock: Clock | None = None,
        token_maker: TokenMaker | None = None,
) -> AuthDependencies:
    """
    High-level factory: settings + session store -> AuthDependencies.

    - builds an EncryptedTokenMaker from the symmetric key (fails fast on a bad key)
    - wires the gate, renewal and issuance use cases around it
    - returns an AuthDependencies facade.

    `token_maker` lets tests plug in a double with deterministic output.
    """
    clock = clock or SystemClock()
    maker: TokenMaker = token_maker or EncryptedTokenMaker(
        settings.token_symmetric_key,
        clock=clock,
    )

    issue_uc = IssueSessionUseCase(
        token_maker=maker,
        session_store=session_store,
        clock=clock,
        access_token_ttl=settings.access_token_duration,
        refresh_token_ttl=settings.refresh_token_duration,
    )
    renew_uc = RenewAccessTokenUseCase(
        token_maker=maker,
        session_store=session_store,
        clock=clock,
        access_token_ttl=settings.access_token_duration,
        issue_session=issue_uc,
        rotate_refresh_tokens=settings.rotate_refresh_tokens,
        store_timeout=settings.session_store_timeout,
    )

    return AuthDependencies(
        auth_use_case=AuthenticateTokenUseCase(token_maker=maker),
        renew_use_case=renew_uc,
        issue_use_case=issue_uc,
    )
