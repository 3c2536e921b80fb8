# authsvc/services/tokens/revocation.py
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from authsvc.services._shared.clock import now_utc
from authsvc.services._shared.errors import TokenNotFoundError
from authsvc.services._shared.ports import ClaimCodec, TokenMetadataStore
from authsvc.services.tokens.dto import TokenKind, TokenMetadataRecord, TokenStats

logger = logging.getLogger(__name__)


class RevocationManager:
    """
    Revocation state transitions, expiry cleanup and metadata queries.

    Revocation is one-way and idempotent: revoking an already revoked token
    succeeds without changes. Only unknown tokens are an error.
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

    # ------------------------------------------------------------------ #
    # Revocation
    # ------------------------------------------------------------------ #

    def revoke(self, token: str) -> str:
        """
        Revoke a token presented as a string.

        The signature must verify but expiry is ignored, so tokens that just
        expired or suffer from clock skew can still be revoked.

        :returns: The revoked token identifier.
        :raises InvalidTokenError: If the token is not signed by us.
        :raises TokenNotFoundError: If no metadata record exists.
        """
        claims = self.codec.decode_lifetime_unchecked(token)
        self.revoke_by_id(claims.token_id)
        return claims.token_id

    def revoke_by_id(self, token_id: str) -> None:
        """
        :raises TokenNotFoundError: If no metadata record exists.
        """
        if not self.store.revoke(token_id):
            logger.warning("Revocation of unknown token", extra={"token_id": token_id})
            raise TokenNotFoundError(token_id=token_id)
        logger.info("Token revoked", extra={"token_id": token_id})

    def revoke_all_for_user(self, user_id: int) -> int:
        """
        Log a user out everywhere.

        :returns: Number of records that were still unrevoked.
        """
        count = self.store.revoke_all_for_user(user_id)
        logger.info("User tokens revoked", extra={"user_id": user_id, "count": count})
        return count

    def cleanup_expired(self, now: datetime | None = None) -> int:
        """
        Delete every record that expired strictly before ``now``, revoked or not.

        Maintenance sweep; run it from a scheduler, not from request handlers.

        :returns: Number of deleted records.
        """
        cutoff = now if now is not None else self.clock()
        count = self.store.delete_expired(cutoff)
        logger.info("Expired token metadata deleted", extra={"count": count})
        return count

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def get_metadata(self, token_id: str) -> TokenMetadataRecord:
        record = self.store.get(token_id)
        if record is None:
            raise TokenNotFoundError(token_id=token_id)
        return record

    def is_revoked(self, token_id: str) -> bool:
        """Return the revocation flag; unknown tokens count as revoked."""
        revoked = self.store.is_revoked(token_id)
        return True if revoked is None else revoked

    def list_for_user(
        self,
        user_id: int,
        *,
        active_only: bool = False,
        kind: TokenKind | None = None,
    ) -> list[TokenMetadataRecord]:
        """List a user's token records, newest first."""
        active_at = self.clock() if active_only else None
        return self.store.list_for_user(user_id, active_at=active_at, kind=kind)

    def count_active_for_user(self, user_id: int, kind: TokenKind | None = None) -> int:
        return self.store.count_for_user(user_id, active_at=self.clock(), kind=kind)

    def stats(self) -> TokenStats:
        return self.store.stats(self.clock())
