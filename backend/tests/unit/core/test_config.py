"""Tests for environment parsing and start-up validation of settings."""

from __future__ import annotations

from datetime import timedelta

import pytest
from authsvc.core.config import (
    DEFAULT_JWT_SECRET,
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    env_bool,
    env_int,
    get_config,
    validate_config,
)


def _settings(**overrides):
    values = {
        "JWT_SECRET_KEY": "s" * 64,
        "JWT_ACCESS_TOKEN_EXPIRES": timedelta(minutes=15),
        "JWT_REFRESH_TOKEN_EXPIRES": timedelta(days=7),
        "DEBUG": False,
        "TESTING": False,
    }
    values.update(overrides)
    return values


@pytest.mark.parametrize(
    "raw,expected", [("1", True), ("Yes", True), (" on ", True), ("0", False), ("nope", False)]
)
def test_env_bool(monkeypatch, raw, expected):
    monkeypatch.setenv("SOME_FLAG", raw)
    assert env_bool("SOME_FLAG") is expected


def test_env_bool_default(monkeypatch):
    monkeypatch.delenv("SOME_FLAG", raising=False)
    assert env_bool("SOME_FLAG", True) is True


def test_env_int(monkeypatch):
    monkeypatch.setenv("SOME_INT", " 30 ")
    assert env_int("SOME_INT", 5) == 30
    monkeypatch.setenv("SOME_INT", "")
    assert env_int("SOME_INT", 5) == 5
    monkeypatch.setenv("SOME_INT", "thirty")
    with pytest.raises(ValueError, match="SOME_INT"):
        env_int("SOME_INT", 5)


@pytest.mark.parametrize(
    "name,expected",
    [
        ("production", ProductionConfig),
        ("TESTING", TestingConfig),
        ("development", DevelopmentConfig),
        ("unknown", DevelopmentConfig),
    ],
)
def test_get_config(monkeypatch, name, expected):
    monkeypatch.setenv("APP_ENV", name)
    assert get_config() is expected


def test_validate_accepts_sane_settings():
    validate_config(_settings())


def test_validate_requires_secret():
    with pytest.raises(RuntimeError, match="must be set"):
        validate_config(_settings(JWT_SECRET_KEY=""))


def test_placeholder_secret_refused_in_production():
    with pytest.raises(RuntimeError, match="placeholder"):
        validate_config(_settings(JWT_SECRET_KEY=DEFAULT_JWT_SECRET))
    validate_config(_settings(JWT_SECRET_KEY=DEFAULT_JWT_SECRET, DEBUG=True))


@pytest.mark.parametrize("key", ["JWT_ACCESS_TOKEN_EXPIRES", "JWT_REFRESH_TOKEN_EXPIRES"])
@pytest.mark.parametrize("value", [timedelta(0), timedelta(seconds=-5), 900])
def test_lifetimes_must_be_positive_timedeltas(key, value):
    with pytest.raises(RuntimeError, match=key):
        validate_config(_settings(**{key: value}))
