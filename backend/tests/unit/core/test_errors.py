"""Mapping of service-level errors onto HTTP problems."""

from __future__ import annotations

import pytest
from authsvc.core.errors import APIError, Conflict, NotFound, ServiceUnavailable, Unauthorized
from authsvc.services._shared.base import INVALID_TOKEN_MESSAGE, BaseService
from authsvc.services._shared.errors import (
    AuthenticationError,
    ConflictError,
    InvalidTokenError,
    InvalidTokenTypeError,
    NotFoundError,
    ServiceError,
    TokenExpiredError,
    TokenNotFoundError,
    TokenPersistenceError,
    TokenRevokedError,
    UserNotFoundError,
)


@pytest.mark.parametrize(
    "exc",
    [
        InvalidTokenError("Invalid token: Signature verification failed"),
        TokenExpiredError(),
        TokenRevokedError(token_id="t"),
        TokenNotFoundError(token_id="t"),
        InvalidTokenTypeError(),
        UserNotFoundError(42),
    ],
)
def test_token_rejections_share_one_response(exc):
    translated = BaseService.translate_exceptions(exc)
    assert isinstance(translated, Unauthorized)
    assert translated.status_code == 401
    assert translated.message == INVALID_TOKEN_MESSAGE


@pytest.mark.parametrize(
    "exc,expected,status",
    [
        (AuthenticationError(), Unauthorized, 401),
        (NotFoundError("User", 1), NotFound, 404),
        (ConflictError("User", "email already in use"), Conflict, 409),
        (TokenPersistenceError(), ServiceUnavailable, 503),
        (ServiceError("odd"), APIError, 400),
    ],
)
def test_other_service_errors(exc, expected, status):
    translated = BaseService.translate_exceptions(exc)
    assert isinstance(translated, expected)
    assert translated.status_code == status


def test_non_service_errors_pass_through():
    exc = KeyError("x")
    assert BaseService.translate_exceptions(exc) is exc


def test_token_error_messages():
    assert str(TokenRevokedError()) == "Token has been revoked"
    assert str(InvalidTokenTypeError("Refresh token required")) == "Refresh token required"
    assert TokenNotFoundError(token_id="abc").token_id == "abc"
    assert str(NotFoundError("User", 3)) == "User not found: 3"
