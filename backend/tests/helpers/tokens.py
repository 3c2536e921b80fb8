"""Tiny helpers shared across token test modules."""

from __future__ import annotations

import json
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from typing import Any

from authsvc.services.tokens.dto import TokenClaims, TokenKind
from jwt.utils import base64url_encode

T0 = datetime(2024, 1, 1, tzinfo=UTC)


def make_claims(**overrides: Any) -> TokenClaims:
    """Build claims for user 42 issued at :data:`T0`, overridable per field."""
    claims = TokenClaims(
        token_id="tok-1",
        user_id=42,
        email="a@b.com",
        kind=TokenKind.ACCESS,
        issuer="authsvc-test",
        issued_at=T0,
        not_before=T0,
        expires_at=T0 + timedelta(minutes=15),
        role="user",
    )
    return replace(claims, **overrides)


def _b64(data: dict[str, Any]) -> str:
    return base64url_encode(json.dumps(data, separators=(",", ":")).encode()).decode()


def forge_token(header: dict[str, Any], payload: dict[str, Any], signature: str = "") -> str:
    """Assemble a compact JWS by hand, e.g. to try ``alg: none``."""
    return f"{_b64(header)}.{_b64(payload)}.{signature}"


def tamper(token: str) -> str:
    """Change the first character of the signature segment."""
    head, body, sig = token.split(".")
    flipped = "A" if sig[0] != "A" else "B"
    return f"{head}.{body}.{flipped}{sig[1:]}"
