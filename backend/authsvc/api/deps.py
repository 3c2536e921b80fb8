"""Request helpers shared by the v1 views: bearer extraction and auth guards."""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, g, jsonify, request

from authsvc.core.errors import Unauthorized
from authsvc.services.tokens.dto import BEARER, TokenClaims, TokenKind
from authsvc.services.tokens.service import get_token_service

F = TypeVar("F", bound=Callable[..., Any])


def bearer_token() -> str:
    """Read the credential from ``Authorization: Bearer <token>``.

    The scheme is matched case-insensitively.

    :raises Unauthorized: If the header is absent, uses another scheme or is empty.
    """
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    token = token.strip()
    if not token or scheme.lower() != BEARER.lower():
        raise Unauthorized("Missing bearer token")
    return token


def require_auth(func: F) -> F:
    """Reject the call unless it presents a live access token.

    Verified claims land on ``g.token_claims`` for :func:`current_claims`.
    """

    @functools.wraps(func)
    def guarded(*args: Any, **kwargs: Any):
        g.token_claims = get_token_service().validate(bearer_token(), TokenKind.ACCESS)
        return func(*args, **kwargs)

    return cast(F, guarded)


def current_claims() -> TokenClaims:
    return cast(TokenClaims, g.token_claims)


def json_response(payload: Any, *, status: int = 200) -> Response:
    response = jsonify(payload)
    response.status_code = status
    return response
