# tests/test_token_maker.py
import os
from datetime import timedelta

import jwt
import pytest
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305

from conftest import OTHER_KEY, START, TEST_KEY
from pkg_tokenauth.adapters.clock import FixedClock, SystemClock
from pkg_tokenauth.adapters.crypto import encrypted_token_maker as etm
from pkg_tokenauth.adapters.crypto.encrypted_token_maker import TOKEN_HEADER, EncryptedTokenMaker
from pkg_tokenauth.domain.exceptions import InvalidKeyError, InvalidTokenError, TokenExpiredError
from pkg_tokenauth.domain.value_objects import SymmetricKey


def test_create_and_verify_token(maker, clock):
    issued = maker.create_token("alice", timedelta(minutes=1))

    assert issued.token.startswith(TOKEN_HEADER)
    assert issued.payload.subject == "alice"
    assert issued.payload.issued_at == clock.now()
    assert issued.payload.expires_at == clock.now() + timedelta(minutes=1)

    payload = maker.verify_token(issued.token)
    assert payload == issued.payload


@pytest.mark.parametrize("subject", ["alice", "bob_42", "Ünïcødé user", "a" * 256])
def test_round_trip_before_expiry(maker, clock, subject):
    ttl = timedelta(minutes=5)
    issued = maker.create_token(subject, ttl)

    clock.advance(ttl - timedelta(microseconds=1))
    assert maker.verify_token(issued.token).subject == subject


def test_payload_is_not_readable_from_wire_text(maker):
    issued = maker.create_token("very-recognisable-subject", timedelta(minutes=1))

    assert "very-recognisable-subject" not in issued.token
    assert str(issued.payload.id) not in issued.token
    # no inner JWS leaking through either
    with pytest.raises(jwt.PyJWTError):
        jwt.decode(issued.token[len(TOKEN_HEADER):], options={"verify_signature": False})


def test_same_payload_twice_encrypts_differently(maker):
    a = maker.create_token("alice", timedelta(minutes=1))
    b = maker.create_token("alice", timedelta(minutes=1))

    assert a.token != b.token
    assert a.payload.id != b.payload.id


@pytest.mark.parametrize(
    "elapsed",
    [timedelta(minutes=1), timedelta(minutes=1, microseconds=1), timedelta(days=30)],
)
def test_expired_token(maker, clock, elapsed):
    issued = maker.create_token("alice", timedelta(minutes=1))
    clock.advance(elapsed)

    with pytest.raises(TokenExpiredError) as excinfo:
        maker.verify_token(issued.token)

    # expired tokens still hand back a payload for logging
    assert excinfo.value.payload == issued.payload


def test_tampered_token_every_position(maker):
    token = maker.create_token("alice", timedelta(minutes=1)).token

    for i, char in enumerate(token):
        replacement = "A" if char != "A" else "B"
        tampered = token[:i] + replacement + token[i + 1:]

        with pytest.raises(InvalidTokenError):
            maker.verify_token(tampered)


def test_truncated_and_extended_token(maker):
    token = maker.create_token("alice", timedelta(minutes=1)).token

    for tampered in (token[:-1], token[:-4], token + "A", token + "AAAA", token[len(TOKEN_HEADER):]):
        with pytest.raises(InvalidTokenError):
            maker.verify_token(tampered)


def test_key_isolation(clock):
    maker_a = EncryptedTokenMaker(TEST_KEY, clock=clock)
    maker_b = EncryptedTokenMaker(OTHER_KEY, clock=clock)

    issued = maker_a.create_token("alice", timedelta(minutes=1))

    with pytest.raises(InvalidTokenError):
        maker_b.verify_token(issued.token)

    # a second maker on the same key reads it fine
    assert EncryptedTokenMaker(TEST_KEY, clock=clock).verify_token(issued.token) == issued.payload


@pytest.mark.parametrize(
    "key",
    ["", "short", TEST_KEY[:-1], TEST_KEY + "x", b"\x00" * 16],
)
def test_invalid_key_size(key):
    with pytest.raises(InvalidKeyError):
        EncryptedTokenMaker(key)


def test_key_forms_are_equivalent(clock):
    issued = EncryptedTokenMaker(TEST_KEY, clock=clock).create_token("alice", timedelta(minutes=1))

    for key in (TEST_KEY.encode(), SymmetricKey.from_str(TEST_KEY)):
        assert EncryptedTokenMaker(key, clock=clock).verify_token(issued.token).subject == "alice"


@pytest.mark.parametrize(
    "token",
    [
        "",
        "garbage",
        TOKEN_HEADER,
        TOKEN_HEADER + "!!!!",
        TOKEN_HEADER + "AAAA",
        "v2.local.AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA",
        TOKEN_HEADER + "ééééé",
        None,
        42,
    ],
)
def test_garbage_tokens(maker, token):
    with pytest.raises(InvalidTokenError) as excinfo:
        maker.verify_token(token)

    assert str(excinfo.value) == "token is invalid"


def _seal(claims):
    """Build a token with the right keys but arbitrary inner claims."""
    key = TEST_KEY.encode()
    inner = jwt.encode(claims, etm._derive(key, etm._SIGNING_INFO), algorithm="HS256")
    aead = ChaCha20Poly1305(etm._derive(key, etm._ENCRYPTION_INFO))
    nonce = os.urandom(etm.NONCE_SIZE)
    sealed = aead.encrypt(nonce, inner.encode("ascii"), TOKEN_HEADER.encode("ascii"))
    return TOKEN_HEADER + etm._b64encode(nonce + sealed)


def test_sealing_helper_matches_maker(maker, clock):
    issued = maker.create_token("alice", timedelta(minutes=1))
    token = _seal(issued.payload.to_claims())

    assert maker.verify_token(token) == issued.payload


@pytest.mark.parametrize("missing", ["jti", "sub", "issued_at", "expired_at"])
def test_decryptable_but_incomplete_claims(maker, missing):
    claims = maker.create_token("alice", timedelta(minutes=1)).payload.to_claims()
    del claims[missing]

    with pytest.raises(InvalidTokenError):
        maker.verify_token(_seal(claims))


def test_decryptable_but_wrong_claim_types(maker):
    claims = maker.create_token("alice", timedelta(minutes=1)).payload.to_claims()
    claims["issued_at"] = "not a timestamp"

    with pytest.raises(InvalidTokenError):
        maker.verify_token(_seal(claims))


def test_inner_token_signed_with_other_key(maker):
    claims = maker.create_token("alice", timedelta(minutes=1)).payload.to_claims()
    key = TEST_KEY.encode()
    inner = jwt.encode(claims, b"k" * 32, algorithm="HS256")
    aead = ChaCha20Poly1305(etm._derive(key, etm._ENCRYPTION_INFO))
    nonce = os.urandom(etm.NONCE_SIZE)
    sealed = aead.encrypt(nonce, inner.encode("ascii"), TOKEN_HEADER.encode("ascii"))

    with pytest.raises(InvalidTokenError):
        maker.verify_token(TOKEN_HEADER + etm._b64encode(nonce + sealed))


def test_non_positive_ttl(maker):
    with pytest.raises(ValueError):
        maker.create_token("alice", timedelta(0))


def test_default_clock_is_system_clock():
    maker = EncryptedTokenMaker(TEST_KEY)
    issued = maker.create_token("alice", timedelta(minutes=1))

    assert maker.verify_token(issued.token).subject == "alice"
    assert abs(issued.payload.issued_at - SystemClock().now()) < timedelta(minutes=1)


def test_fixed_clock():
    clock = FixedClock(START)
    assert clock.now() == START
    assert clock.advance(timedelta(seconds=5)) == START + timedelta(seconds=5)
    clock.set(START)
    assert clock.now() == START

    with pytest.raises(ValueError):
        FixedClock(START.replace(tzinfo=None))
