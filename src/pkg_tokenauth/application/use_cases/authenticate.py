from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ...domain.constants import AUTHORIZATION_TYPE_BEARER
from ...domain.entities import TokenPayload
from ...domain.exceptions import AuthenticationError, InvalidTokenError, TokenExpiredError
from ...domain.ports import TokenMaker

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AuthenticateTokenUseCase:
    """
    Application use case behind every protected request:
    - parse the Authorization header value
    - verify the bearer credential via the TokenMaker port

    Framework-agnostic and stateless; integrations decide where the
    returned payload lives on their request object.
    """

    token_maker: TokenMaker

    def execute(self, authorization_header: Optional[str]) -> TokenPayload:
        """
        Authenticate an Authorization header value and return the token payload.

        Header problems are rejected before any cryptographic work is done.

        Raises:
            AuthenticationError  (bad/missing header, unsupported scheme)
            InvalidTokenError
            TokenExpiredError
        """
        token = self._parse_header(authorization_header)

        try:
            return self.token_maker.verify_token(token)
        except TokenExpiredError as exc:
            if exc.payload is not None:
                logger.debug("expired access token for subject %r", exc.payload.subject)
            raise
        except InvalidTokenError:
            logger.debug("rejected invalid access token")
            raise

    # ------------------------------------------------------------------ #
    # Internal: header -> credential
    # ------------------------------------------------------------------ #

    @staticmethod
    def _parse_header(authorization_header: Optional[str]) -> str:
        if not authorization_header:
            raise AuthenticationError("authorization header is not provided")

        fields = authorization_header.split(" ", 1)
        if len(fields) < 2:
            raise AuthenticationError("invalid authorization header format")

        scheme, token = fields
        if scheme.lower() != AUTHORIZATION_TYPE_BEARER:
            raise AuthenticationError("unsupported authorization type")

        return token
