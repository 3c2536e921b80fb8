# authsvc/services/tokens/service.py
from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime, timedelta
from typing import Any, cast

from flask import Flask, current_app

from authsvc.services._shared.clock import now_utc
from authsvc.services._shared.ports import ClaimCodec, TokenMetadataStore, UserDirectory
from authsvc.services.tokens.dto import (
    IssuedToken,
    TokenClaims,
    TokenConfig,
    TokenKind,
    TokenMetadataRecord,
    TokenPair,
    TokenStats,
    UserIdentity,
)
from authsvc.services.tokens.issuer import TokenIssuer
from authsvc.services.tokens.refresh import RefreshCoordinator
from authsvc.services.tokens.revocation import RevocationManager
from authsvc.services.tokens.validator import TokenValidator

EXTENSION_KEY = "token_service"


class TokenService:
    """
    Facade over the token lifecycle components.

    All collaborators are injected; the signing secret lives only inside the
    codec instance.

    :param codec: Claim codec (signing/verification).
    :param store: Token metadata store.
    :param users: User directory consulted on refresh.
    :param config: Issuer and lifetimes.
    :param clock: Source of the current UTC instant.
    """

    def __init__(
        self,
        *,
        codec: ClaimCodec,
        store: TokenMetadataStore,
        users: UserDirectory,
        config: TokenConfig,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self.config = config
        self.issuer = TokenIssuer(codec, store, config, clock)
        self.validator = TokenValidator(codec, store, clock)
        self.refresher = RefreshCoordinator(self.validator, self.issuer, users)
        self.revocation = RevocationManager(codec, store, clock)

    # -------------------------- lifecycle ------------------------------

    def issue(
        self,
        user: UserIdentity,
        *,
        device_id: str | None = None,
        client_id: str | None = None,
    ) -> TokenPair:
        return self.issuer.issue(user, device_id=device_id, client_id=client_id)

    def validate(self, token: str, expected_kind: TokenKind | None = None) -> TokenClaims:
        return self.validator.validate(token, expected_kind)

    def refresh(
        self,
        refresh_token: str,
        *,
        device_id: str | None = None,
        client_id: str | None = None,
    ) -> IssuedToken:
        return self.refresher.refresh(refresh_token, device_id=device_id, client_id=client_id)

    def revoke(self, token: str) -> str:
        return self.revocation.revoke(token)

    def revoke_by_id(self, token_id: str) -> None:
        self.revocation.revoke_by_id(token_id)

    def revoke_all_for_user(self, user_id: int) -> int:
        return self.revocation.revoke_all_for_user(user_id)

    def cleanup_expired(self, now: datetime | None = None) -> int:
        return self.revocation.cleanup_expired(now)

    # -------------------------- queries --------------------------------

    def get_metadata(self, token_id: str) -> TokenMetadataRecord:
        return self.revocation.get_metadata(token_id)

    def is_revoked(self, token_id: str) -> bool:
        return self.revocation.is_revoked(token_id)

    def list_sessions(
        self,
        user_id: int,
        *,
        active_only: bool = True,
        kind: TokenKind | None = None,
    ) -> list[TokenMetadataRecord]:
        return self.revocation.list_for_user(user_id, active_only=active_only, kind=kind)

    def count_active(self, user_id: int, kind: TokenKind | None = None) -> int:
        return self.revocation.count_active_for_user(user_id, kind)

    def stats(self) -> TokenStats:
        return self.revocation.stats()


# --------------------------------------------------------------------------- #
# Flask wiring
# --------------------------------------------------------------------------- #


def _as_timedelta(value: Any, *, unit: str) -> timedelta:
    if isinstance(value, timedelta):
        return value
    return timedelta(**{unit: int(value)})


def build_token_service(config: Mapping[str, Any]) -> TokenService:
    """
    Wire the PyJWT codec and the SQLAlchemy adapters from Flask settings.

    :param config: Application configuration (``app.config``).
    :returns: Ready-to-use token service.
    :raises ValueError: If the signing settings are unusable.
    """
    from authsvc.infra.db.sqlalchemy_metadata_store import SQLAlchemyTokenMetadataStore
    from authsvc.infra.db.sqlalchemy_user_directory import SQLAlchemyUserDirectory
    from authsvc.infra.jwt.pyjwt_claim_codec import PyJWTClaimCodec

    issuer = config.get("JWT_ISSUER", "authsvc")
    codec = PyJWTClaimCodec(
        config["JWT_SECRET_KEY"],
        algorithm=config.get("JWT_ALGORITHM", "HS256"),
        issuer=issuer,
        leeway=_as_timedelta(config.get("JWT_LEEWAY", 0), unit="seconds"),
    )
    token_cfg = TokenConfig(
        issuer=issuer,
        access_expires=_as_timedelta(config["JWT_ACCESS_TOKEN_EXPIRES"], unit="seconds"),
        refresh_expires=_as_timedelta(config["JWT_REFRESH_TOKEN_EXPIRES"], unit="seconds"),
    )
    return TokenService(
        codec=codec,
        store=SQLAlchemyTokenMetadataStore(),
        users=SQLAlchemyUserDirectory(),
        config=token_cfg,
    )


def init_app(app: Flask) -> None:
    """Build the token service once and attach it to ``app.extensions``."""
    app.extensions[EXTENSION_KEY] = build_token_service(app.config)


def get_token_service() -> TokenService:
    """Return the token service of the current application."""
    return cast(TokenService, current_app.extensions[EXTENSION_KEY])
