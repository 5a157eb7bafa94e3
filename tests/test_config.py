# tests/test_config.py
from datetime import timedelta

import pytest

from conftest import TEST_KEY
from pkg_tokenauth.config import TokenSettings, parse_duration, settings_from_env
from pkg_tokenauth.domain.exceptions import ConfigurationError, InvalidKeyError

ENV_KEYS = (
    "TOKEN_SYMMETRIC_KEY",
    "ACCESS_TOKEN_DURATION",
    "REFRESH_TOKEN_DURATION",
    "ROTATE_REFRESH_TOKENS",
    "SESSION_STORE_TIMEOUT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("15m", timedelta(minutes=15)),
        ("24h", timedelta(hours=24)),
        ("1h30m", timedelta(hours=1, minutes=30)),
        ("90s", timedelta(seconds=90)),
        ("500ms", timedelta(milliseconds=500)),
        ("1.5h", timedelta(minutes=90)),
        ("900", timedelta(seconds=900)),
        (" 2.5 ", timedelta(seconds=2.5)),
    ],
)
def test_parse_duration(raw, expected):
    assert parse_duration(raw) == expected


@pytest.mark.parametrize("raw", ["", "   ", "abc", "15x", "m15", "1h 30m", "h", "nan", "inf"])
def test_parse_duration_rejects(raw):
    with pytest.raises(ConfigurationError):
        parse_duration(raw)


def test_parse_duration_out_of_range():
    with pytest.raises(ConfigurationError):
        parse_duration("99999999999999h")


def test_settings_from_env_defaults(monkeypatch):
    monkeypatch.setenv("TOKEN_SYMMETRIC_KEY", TEST_KEY)

    settings = settings_from_env()

    assert settings.token_symmetric_key == TEST_KEY
    assert settings.access_token_duration == timedelta(minutes=15)
    assert settings.refresh_token_duration == timedelta(hours=24)
    assert settings.rotate_refresh_tokens is False
    assert settings.session_store_timeout is None


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("TOKEN_SYMMETRIC_KEY", TEST_KEY)
    monkeypatch.setenv("ACCESS_TOKEN_DURATION", "5m")
    monkeypatch.setenv("REFRESH_TOKEN_DURATION", "168h")
    monkeypatch.setenv("ROTATE_REFRESH_TOKENS", "yes")
    monkeypatch.setenv("SESSION_STORE_TIMEOUT", "0.5")

    settings = settings_from_env()

    assert settings.access_token_duration == timedelta(minutes=5)
    assert settings.refresh_token_duration == timedelta(days=7)
    assert settings.rotate_refresh_tokens is True
    assert settings.session_store_timeout == 0.5


def test_settings_from_env_missing_key():
    with pytest.raises(ConfigurationError) as excinfo:
        settings_from_env()

    assert "TOKEN_SYMMETRIC_KEY" in str(excinfo.value)


def test_settings_from_env_bad_key(monkeypatch):
    monkeypatch.setenv("TOKEN_SYMMETRIC_KEY", "too-short")

    with pytest.raises(InvalidKeyError):
        settings_from_env()


@pytest.mark.parametrize(
    "var, value",
    [
        ("ACCESS_TOKEN_DURATION", "soon"),
        ("ACCESS_TOKEN_DURATION", "0"),
        ("REFRESH_TOKEN_DURATION", "-1"),
        ("SESSION_STORE_TIMEOUT", "fast"),
        ("SESSION_STORE_TIMEOUT", "0"),
    ],
)
def test_settings_from_env_bad_values(monkeypatch, var, value):
    monkeypatch.setenv("TOKEN_SYMMETRIC_KEY", TEST_KEY)
    monkeypatch.setenv(var, value)

    with pytest.raises(ConfigurationError):
        settings_from_env()


def test_settings_repr_hides_key():
    settings = TokenSettings(token_symmetric_key=TEST_KEY)

    assert TEST_KEY not in repr(settings)
    assert "<redacted>" in repr(settings)
