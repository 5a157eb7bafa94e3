"""
pkg_tokenauth

Clean-architecture core for short-lived encrypted access tokens and the
refresh-token/session renewal protocol, integrable with FastAPI and
Strawberry GraphQL.
"""

__version__ = "0.1.0"

from .domain.entities import (
    IssuedToken,
    RenewedAccessToken,
    Session,
    SessionGrant,
    TokenPayload,
)
from .domain.constants import (
    AUTHORIZATION_HEADER_KEY,
    AUTHORIZATION_PAYLOAD_KEY,
    AUTHORIZATION_TYPE_BEARER,
    KEY_SIZE,
    RejectionReason,
)
from .domain.exceptions import (
    AuthenticationError,
    ConfigurationError,
    InvalidKeyError,
    InvalidTokenError,
    SessionNotFoundError,
    SessionRejectedError,
    SessionStoreError,
    TokenExpiredError,
)
from .domain.value_objects import ClientMetadata, SymmetricKey
from .domain.ports import Clock, SessionStore, TokenMaker

from .application.use_cases.authenticate import AuthenticateTokenUseCase
from .application.use_cases.issue_session import IssueSessionUseCase
from .application.use_cases.renew import RenewAccessTokenUseCase

from .adapters.clock import FixedClock, SystemClock
from .adapters.crypto.encrypted_token_maker import EncryptedTokenMaker
from .adapters.memory.session_store import InMemorySessionStore

from .config import TokenSettings, settings_from_env
from .integrations.common.auth_factory import AuthDependencies, create_auth_dependencies

__all__ = [
    "__version__",
    # domain core
    "TokenPayload",
    "IssuedToken",
    "Session",
    "SessionGrant",
    "RenewedAccessToken",
    "ClientMetadata",
    "SymmetricKey",
    "RejectionReason",
    "KEY_SIZE",
    "AUTHORIZATION_HEADER_KEY",
    "AUTHORIZATION_TYPE_BEARER",
    "AUTHORIZATION_PAYLOAD_KEY",
    # ports
    "Clock",
    "TokenMaker",
    "SessionStore",
    # exceptions
    "AuthenticationError",
    "InvalidTokenError",
    "TokenExpiredError",
    "SessionNotFoundError",
    "SessionRejectedError",
    "SessionStoreError",
    "ConfigurationError",
    "InvalidKeyError",
    # use cases
    "AuthenticateTokenUseCase",
    "RenewAccessTokenUseCase",
    "IssueSessionUseCase",
    # adapters
    "SystemClock",
    "FixedClock",
    "EncryptedTokenMaker",
    "InMemorySessionStore",
    # config / wiring
    "TokenSettings",
    "settings_from_env",
    "AuthDependencies",
    "create_auth_dependencies",
]
