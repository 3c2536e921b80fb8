# authsvc/services/tokens/issuer.py
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from uuid import uuid4

from authsvc.services._shared.clock import now_utc
from authsvc.services._shared.errors import TokenPersistenceError
from authsvc.services._shared.ports import ClaimCodec, TokenMetadataStore
from authsvc.services.tokens.dto import (
    IssuedToken,
    TokenClaims,
    TokenConfig,
    TokenKind,
    TokenMetadataRecord,
    TokenPair,
    UserIdentity,
)

logger = logging.getLogger(__name__)


def new_token_id() -> str:
    """Return a fresh random token identifier (``jti``)."""
    return str(uuid4())


class TokenIssuer:
    """
    Mint signed tokens and record their metadata.

    A token only counts as issued once its metadata is stored: if the store
    refuses, the signed strings are dropped and :class:`TokenPersistenceError`
    is raised.

    :param codec: Claim codec used for signing.
    :param store: Metadata store receiving one record per token.
    :param config: Issuer string and lifetimes.
    :param clock: Source of the current UTC instant.
    """

    def __init__(
        self,
        codec: ClaimCodec,
        store: TokenMetadataStore,
        config: TokenConfig,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self.codec = codec
        self.store = store
        self.config = config
        self.clock = clock

    def _now(self) -> datetime:
        # Signed claims keep whole seconds only
        return self.clock().replace(microsecond=0)

    def _claims(
        self,
        user: UserIdentity,
        kind: TokenKind,
        now: datetime,
        *,
        device_id: str | None,
        client_id: str | None,
    ) -> TokenClaims:
        lifetime = (
            self.config.access_expires if kind is TokenKind.ACCESS else self.config.refresh_expires
        )
        return TokenClaims(
            token_id=new_token_id(),
            user_id=user.id,
            email=user.email,
            kind=kind,
            issuer=self.config.issuer,
            issued_at=now,
            not_before=now,
            expires_at=now + lifetime,
            role=user.role if kind is TokenKind.ACCESS else None,
            device_id=device_id,
            client_id=client_id,
        )

    def _persist(self, claims: list[TokenClaims], now: datetime) -> None:
        records = [TokenMetadataRecord.for_claims(c, created_at=now) for c in claims]
        try:
            self.store.save_many(records)
        except TokenPersistenceError:
            raise
        except Exception as exc:
            logger.error(
                "Token metadata could not be stored",
                extra={"user_id": claims[0].user_id, "count": len(records)},
                exc_info=True,
            )
            raise TokenPersistenceError() from exc

    @staticmethod
    def _issued(claims: TokenClaims, token: str) -> IssuedToken:
        return IssuedToken(
            token=token,
            token_id=claims.token_id,
            expires_at=claims.expires_at,
            issued_at=claims.issued_at,
        )

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def issue(
        self,
        user: UserIdentity,
        *,
        device_id: str | None = None,
        client_id: str | None = None,
    ) -> TokenPair:
        """
        Issue an access/refresh pair for ``user``.

        Both metadata records are written in a single store call.

        :param user: Subject identity (id, email, role).
        :param device_id: Optional device identifier carried by both tokens.
        :param client_id: Optional client identifier carried by both tokens.
        :returns: The issued pair.
        :raises TokenPersistenceError: If the metadata could not be stored.
        """
        now = self._now()
        access = self._claims(
            user, TokenKind.ACCESS, now, device_id=device_id, client_id=client_id
        )
        refresh = self._claims(
            user, TokenKind.REFRESH, now, device_id=device_id, client_id=client_id
        )
        access_token = self.codec.encode(access)
        refresh_token = self.codec.encode(refresh)

        self._persist([access, refresh], now)
        logger.info(
            "Token pair issued",
            extra={"user_id": user.id, "token_id": access.token_id},
        )
        return TokenPair(
            access=self._issued(access, access_token),
            refresh=self._issued(refresh, refresh_token),
        )

    def issue_access(
        self,
        user: UserIdentity,
        *,
        device_id: str | None = None,
        client_id: str | None = None,
    ) -> IssuedToken:
        """
        Issue a single access token (the refresh path).

        :raises TokenPersistenceError: If the metadata could not be stored.
        """
        now = self._now()
        claims = self._claims(
            user, TokenKind.ACCESS, now, device_id=device_id, client_id=client_id
        )
        token = self.codec.encode(claims)
        self._persist([claims], now)
        logger.info(
            "Access token issued",
            extra={"user_id": user.id, "token_id": claims.token_id, "token_type": "access"},
        )
        return self._issued(claims, token)
