from enum import Enum

# ChaCha20-Poly1305 key length
KEY_SIZE = 32

AUTHORIZATION_HEADER_KEY = "authorization"
AUTHORIZATION_TYPE_BEARER = "bearer"
AUTHORIZATION_PAYLOAD_KEY = "pkg_tokenauth.authorization_payload"


class RejectionReason(Enum):
    SUBJECT_MISMATCH = "subject_mismatch"
    BLOCKED = "blocked"
    TOKEN_MISMATCH = "token_mismatch"
    SESSION_EXPIRED = "session_expired"
