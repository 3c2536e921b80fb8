"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside a SAVEPOINT-backed transaction against an in-memory
SQLite database so data changes never leak between cases. Token services are
also available wired to in-memory doubles for tests that do not need SQL.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from datetime import timedelta
from typing import Any

import pytest
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from authsvc.core.config import TestingConfig
from authsvc.core.extensions import db as _db  # Flask-SQLAlchemy instance
from authsvc.factory import create_app  # application factory under test
from authsvc.infra.jwt.pyjwt_claim_codec import PyJWTClaimCodec
from authsvc.services._shared.ports import InMemoryTokenMetadataStore, InMemoryUserDirectory
from authsvc.services.tokens.dto import TokenConfig, UserIdentity
from authsvc.services.tokens.service import TokenService

TEST_ISSUER = "authsvc-test"


class TestConfig(TestingConfig):
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - Uses an in-memory SQLite database for speed.
    - Fixed signing secret and issuer so tokens are reproducible.
    - 15 minute access / 168 hour refresh lifetimes.
    """

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_ISSUER = TEST_ISSUER
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=15)
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(hours=168)
    JWT_LEEWAY = timedelta(0)
    LOG_LEVEL = "WARNING"


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing."""
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestConfig, instance_relative_config=False)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session."""
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Keep a dedicated DBAPI connection open for the whole session."""
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(db, connection):
    """Session for one test; everything it writes is rolled back afterwards.

    The outer transaction is never committed. App code runs through this
    session (``db.session`` is swapped for the duration), and because the
    connection already sits inside a SAVEPOINT the session joins in
    ``create_savepoint`` mode: a unit-of-work ``commit()`` only releases its
    own SAVEPOINT, leaving the data visible to later units of work in the
    same test.
    """
    outer = connection.begin()
    scoped = scoped_session(sessionmaker(bind=connection, autoflush=False))
    nested = connection.begin_nested()

    @event.listens_for(scoped(), "after_transaction_end")
    def _reopen_savepoint(sess, trans):  # pragma: no cover
        nonlocal nested
        if trans.nested and not trans._parent.nested:
            nested = connection.begin_nested()

    original = db.session
    db.session.remove()
    db.session = scoped
    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original
        outer.rollback()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(session):
    """Wire Factory Boy's session helper to the transactional session fixture."""
    from tests.factories import FactorySession

    FactorySession.bind(session)
    yield


# -- HTTP / CLI ----------------------------------------------------------------
@pytest.fixture()
def client(app):
    """Return a Flask test client."""
    return app.test_client()


@pytest.fixture()
def cli_runner(app):
    """Return a runner for ``flask`` CLI commands."""
    return app.test_cli_runner()


# -- Time ----------------------------------------------------------------------
@pytest.fixture()
def freeze_time() -> Callable[..., Any]:
    """Factory returning :func:`freezegun.freeze_time`.

    Examples
    --------
    >>> def test_with_frozen_time(freeze_time):
    ...     with freeze_time("2024-01-01") as frozen:
    ...         frozen.tick(60)
    """
    from freezegun import freeze_time as _freeze_time

    def _factory(target: str | None = None) -> Any:
        return _freeze_time(target or "2024-01-01 00:00:00")

    return _factory


# -- Token core wired to in-memory doubles -------------------------------------
@pytest.fixture()
def identity() -> UserIdentity:
    return UserIdentity(id=42, email="a@b.com", role="user")


@pytest.fixture()
def codec() -> PyJWTClaimCodec:
    return PyJWTClaimCodec(TestConfig.JWT_SECRET_KEY, issuer=TEST_ISSUER)


@pytest.fixture()
def token_config() -> TokenConfig:
    return TokenConfig(
        issuer=TEST_ISSUER,
        access_expires=timedelta(minutes=15),
        refresh_expires=timedelta(hours=168),
    )


@pytest.fixture()
def memory_store() -> InMemoryTokenMetadataStore:
    return InMemoryTokenMetadataStore()


@pytest.fixture()
def directory(identity) -> InMemoryUserDirectory:
    return InMemoryUserDirectory([identity])


@pytest.fixture()
def token_service(codec, memory_store, directory, token_config) -> TokenService:
    """Token service over in-memory doubles (no SQL involved)."""
    return TokenService(
        codec=codec,
        store=memory_store,
        users=directory,
        config=token_config,
    )
