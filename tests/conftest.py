# tests/conftest.py
import dataclasses
from datetime import datetime, timedelta, timezone

import pytest

from pkg_tokenauth.adapters.clock import FixedClock
from pkg_tokenauth.adapters.crypto.encrypted_token_maker import EncryptedTokenMaker
from pkg_tokenauth.adapters.memory.session_store import InMemorySessionStore
from pkg_tokenauth.config.settings import TokenSettings
from pkg_tokenauth.domain.entities import Session

TEST_KEY = "12345678901234567890123456789012"
OTHER_KEY = "abcdefghijklmnopqrstuvwxyz012345"
START = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

ACCESS_TTL = timedelta(minutes=15)
REFRESH_TTL = timedelta(hours=24)


class SpyTokenMaker:
    """Wraps a real token maker and counts calls."""

    def __init__(self, inner):
        self.inner = inner
        self.verify_calls = []
        self.create_calls = []

    def create_token(self, subject, ttl):
        self.create_calls.append((subject, ttl))
        return self.inner.create_token(subject, ttl)

    def verify_token(self, token):
        self.verify_calls.append(token)
        return self.inner.verify_token(token)


class RecordingSessionStore(InMemorySessionStore):
    """In-memory store that remembers which ids were looked up."""

    def __init__(self, sessions=None):
        super().__init__(sessions)
        self.lookups = []

    async def get_session_by_id(self, session_id):
        self.lookups.append(session_id)
        return await super().get_session_by_id(session_id)


@pytest.fixture
def clock():
    return FixedClock(START)


@pytest.fixture
def maker(clock):
    return EncryptedTokenMaker(TEST_KEY, clock=clock)


@pytest.fixture
def spy_maker(maker):
    return SpyTokenMaker(maker)


@pytest.fixture
def store():
    return RecordingSessionStore()


@pytest.fixture
def settings():
    return TokenSettings(
        token_symmetric_key=TEST_KEY,
        access_token_duration=ACCESS_TTL,
        refresh_token_duration=REFRESH_TTL,
    )


def make_session(maker, clock, token_subject="alice", **overrides):
    """Issue a refresh token and the session that pairs with it.

    `overrides` apply to the session only, so they can make it disagree
    with the token.
    """
    refresh = maker.create_token(token_subject, REFRESH_TTL)
    session = Session(
        id=refresh.payload.id,
        subject=token_subject,
        refresh_token=refresh.token,
        expires_at=refresh.payload.expires_at,
        created_at=clock.now(),
    )
    if overrides:
        session = dataclasses.replace(session, **overrides)
    return refresh, session
