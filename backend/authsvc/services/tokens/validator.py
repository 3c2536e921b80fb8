# authsvc/services/tokens/validator.py
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from authsvc.services._shared.clock import now_utc
from authsvc.services._shared.errors import (
    InvalidTokenTypeError,
    TokenError,
    TokenNotFoundError,
    TokenRevokedError,
)
from authsvc.services._shared.ports import ClaimCodec, TokenMetadataStore
from authsvc.services.tokens.dto import TokenClaims, TokenKind

logger = logging.getLogger(__name__)


class TokenValidator:
    """
    Full validity check for presented tokens.

    A token is valid when its signature and lifetime verify *and* its metadata
    record exists and is not revoked. A missing record fails closed.
    """

    def __init__(
        self,
        codec: ClaimCodec,
        store: TokenMetadataStore,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self.codec = codec
        self.store = store
        self.clock = clock

    def validate(self, token: str, expected_kind: TokenKind | None = None) -> TokenClaims:
        """
        Validate ``token`` and return its claims.

        :param token: Encoded token string.
        :param expected_kind: When given, tokens of another kind are rejected.
        :returns: Decoded claims.
        :raises InvalidTokenError: Malformed token, bad signature or algorithm.
        :raises TokenExpiredError: Signed expiry has passed.
        :raises TokenNotFoundError: No metadata record for the token.
        :raises TokenRevokedError: The record is flagged as revoked.
        :raises InvalidTokenTypeError: Kind differs from ``expected_kind``.
        """
        try:
            claims = self._check(token, expected_kind)
        except TokenError as exc:
            logger.warning(
                "Token rejected: %s",
                exc,
                extra={"reason": type(exc).__name__, "token_id": exc.token_id},
            )
            raise

        self._touch(claims.token_id)
        return claims

    def _check(self, token: str, expected_kind: TokenKind | None) -> TokenClaims:
        claims = self.codec.decode(token)

        record = self.store.get(claims.token_id)
        if record is None:
            raise TokenNotFoundError(token_id=claims.token_id)
        if record.is_revoked:
            raise TokenRevokedError(token_id=claims.token_id)

        if expected_kind is not None and claims.kind is not expected_kind:
            raise InvalidTokenTypeError(
                f"Expected a {expected_kind.value} token", token_id=claims.token_id
            )
        return claims

    def _touch(self, token_id: str) -> None:
        # Best effort: a failed bookkeeping write never invalidates the token
        try:
            self.store.update_last_used(token_id, self.clock())
        except Exception:
            logger.warning(
                "Could not record token usage",
                extra={"token_id": token_id},
                exc_info=True,
            )
