import base64
import os
from datetime import timedelta
from typing import Any, Dict, Optional, Union

import jwt
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from ...domain.entities import IssuedToken, TokenPayload
from ...domain.exceptions import InvalidTokenError, TokenExpiredError
from ...domain.ports import Clock, TokenMaker
from ...domain.value_objects import SymmetricKey
from ..clock import SystemClock

TOKEN_HEADER = "tka.v1.local."
NONCE_SIZE = 12

_TAG_SIZE = 16
_JWS_ALGORITHM = "HS256"
_REQUIRED_CLAIMS = ["jti", "sub", "issued_at", "expired_at"]

_SIGNING_INFO = b"pkg_tokenauth v1 signing"
_ENCRYPTION_INFO = b"pkg_tokenauth v1 encryption"


class EncryptedTokenMaker(TokenMaker):
    """
    Adapter implementing TokenMaker port with a nested token: an HS256 JWS
    (PyJWT) sealed inside a ChaCha20-Poly1305 envelope (cryptography).

    Wire format:
        tka.v1.local.<base64url(nonce || ciphertext || tag)>

    The header is bound as associated data, so it cannot be swapped either.
    Signing and encryption use separate sub-keys derived from the one
    process-wide key with HKDF-SHA256.
    """

    def __init__(
        self,
        key: Union[SymmetricKey, bytes, str],
        clock: Optional[Clock] = None,
    ) -> None:
        # raises InvalidKeyError before anything is served
        symmetric_key = SymmetricKey.coerce(key)
        self._clock = clock or SystemClock()

        self._signing_key = _derive(symmetric_key.value, _SIGNING_INFO)
        self._aead = ChaCha20Poly1305(_derive(symmetric_key.value, _ENCRYPTION_INFO))
        self._aad = TOKEN_HEADER.encode("ascii")

    # ------------------------------------------------------------------ #
    # Port implementation
    # ------------------------------------------------------------------ #

    def create_token(self, subject: str, ttl: timedelta) -> IssuedToken:
        payload = TokenPayload.new(subject, ttl, self._clock.now())

        inner = jwt.encode(payload.to_claims(), self._signing_key, algorithm=_JWS_ALGORITHM)
        nonce = os.urandom(NONCE_SIZE)
        sealed = self._aead.encrypt(nonce, inner.encode("ascii"), self._aad)

        return IssuedToken(token=TOKEN_HEADER + _b64encode(nonce + sealed), payload=payload)

    def verify_token(self, token: str) -> TokenPayload:
        """
        Decrypt and validate a token.

        Raises:
            InvalidTokenError
            TokenExpiredError
        """
        if not isinstance(token, str):
            raise InvalidTokenError()

        try:
            claims = self._open(token)
            payload = TokenPayload.from_claims(claims)
        except (InvalidTag, jwt.PyJWTError, KeyError, TypeError, ValueError) as exc:
            # one message for every failure: callers must not learn which check failed
            raise InvalidTokenError() from exc

        if payload.is_expired(self._clock.now()):
            raise TokenExpiredError(payload=payload)

        return payload

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _open(self, token: str) -> Dict[str, Any]:
        if not token.startswith(TOKEN_HEADER):
            raise ValueError("unknown token header")

        raw = _b64decode(token[len(TOKEN_HEADER):])
        if len(raw) < NONCE_SIZE + _TAG_SIZE:
            raise ValueError("token body too short")

        nonce, sealed = raw[:NONCE_SIZE], raw[NONCE_SIZE:]
        inner = self._aead.decrypt(nonce, sealed, self._aad).decode("ascii")

        return jwt.decode(
            inner,
            self._signing_key,
            algorithms=[_JWS_ALGORITHM],
            options={"require": _REQUIRED_CLAIMS},
        )


def _derive(key: bytes, info: bytes) -> bytes:
    return HKDF(algorithm=hashes.SHA256(), length=32, salt=None, info=info).derive(key)


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(text: str) -> bytes:
    data = text.encode("ascii")
    raw = base64.urlsafe_b64decode(data + b"=" * (-len(data) % 4))
    # urlsafe_b64decode skips unknown characters and ignores trailing bits
    if _b64encode(raw) != text:
        raise ValueError("non-canonical token encoding")
    return raw
