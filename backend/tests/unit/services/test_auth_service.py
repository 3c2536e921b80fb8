# tests/unit/services/test_auth_service.py
from __future__ import annotations

import pytest
from authsvc.services._shared.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    TokenNotFoundError,
    TokenRevokedError,
)
from authsvc.services.auth.dto import LoginIn, LogoutIn, RegisterIn, UserOut
from authsvc.services.auth.service import AuthService
from authsvc.services.tokens.dto import TokenPair, UserIdentity
from tests.factories.user import UserFactory
from tests.helpers.tokens import make_claims


# ------------------------------ Fixtures ---------------------------------- #
@pytest.fixture()
def service(token_service) -> AuthService:
    """AuthService over the database for users and in-memory doubles for tokens."""
    return AuthService(token_service)


@pytest.fixture()
def user(session, directory):
    user = UserFactory(email="login@example.com", password="correct-horse", role="manager")
    session.commit()
    directory.add(UserIdentity(id=user.id, email=user.email, role=user.role))
    return user


# -------------------------------- Tests ----------------------------------- #
def test_register_creates_active_user(service):
    out = service.register(
        RegisterIn(email="New@Example.com", password="longenough", first_name="Ada")
    )

    assert isinstance(out, UserOut)
    assert out.id is not None
    assert out.email == "new@example.com"
    assert out.role == "user"
    assert out.is_active is True
    assert service.get_user(out.id).first_name == "Ada"


def test_register_rejects_duplicate_email(service, user):
    with pytest.raises(ConflictError):
        service.register(RegisterIn(email="LOGIN@example.com", password="longenough"))


def test_login_issues_token_pair(service, user, memory_store):
    pair = service.login(
        LoginIn(email="login@example.com", password="correct-horse", device_id="laptop")
    )

    assert isinstance(pair, TokenPair)
    claims = service.tokens.validate(pair.access_token)
    assert claims.user_id == user.id
    assert claims.role == "manager"
    assert memory_store.get(pair.refresh.token_id).device_id == "laptop"


@pytest.mark.parametrize(
    "email,password",
    [("login@example.com", "wrong"), ("nobody@example.com", "correct-horse")],
)
def test_login_rejects_bad_credentials(service, user, email, password):
    with pytest.raises(AuthenticationError):
        service.login(LoginIn(email=email, password=password))


def test_login_rejects_inactive_user(service, session):
    UserFactory(email="off@example.com", password="correct-horse", is_active=False)
    session.commit()

    with pytest.raises(AuthenticationError):
        service.login(LoginIn(email="off@example.com", password="correct-horse"))


def test_logout_revokes_presented_token_only(service, user):
    pair = service.login(LoginIn(email=user.email, password="correct-horse"))

    assert service.logout(LogoutIn(token=pair.access_token)) == 1

    with pytest.raises(TokenRevokedError):
        service.tokens.validate(pair.access_token)
    assert service.tokens.validate(pair.refresh_token).user_id == user.id


def test_logout_all_sessions(service, user):
    first = service.login(LoginIn(email=user.email, password="correct-horse"))
    second = service.login(LoginIn(email=user.email, password="correct-horse"))

    assert service.logout(LogoutIn(token=first.refresh_token, all_sessions=True)) == 4

    for token in (first.access_token, second.access_token, second.refresh_token):
        with pytest.raises(TokenRevokedError):
            service.tokens.validate(token)


def test_logout_with_unknown_token(service, codec):
    with pytest.raises(TokenNotFoundError):
        service.logout(LogoutIn(token=codec.encode(make_claims(token_id="ghost"))))


def test_get_user_missing(service):
    with pytest.raises(NotFoundError):
        service.get_user(987654)
