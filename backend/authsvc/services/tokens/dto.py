# authsvc/services/tokens/dto.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

DEFAULT_ACCESS_LIFETIME = timedelta(minutes=15)
DEFAULT_REFRESH_LIFETIME = timedelta(days=7)
BEARER = "Bearer"


class TokenKind(str, Enum):
    """Kind of credential carried by a token."""

    ACCESS = "access"
    REFRESH = "refresh"


# ---------------------------- Claims -------------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """
    Claims embedded in a signed token.

    Timestamps are timezone-aware UTC values truncated to whole seconds, which
    is the resolution the signed representation keeps.

    :param token_id: Unique identifier (``jti``), also the revocation key.
    :param user_id: Subject user identifier.
    :param email: Subject email at issuance.
    :param kind: ``access`` or ``refresh``.
    :param issuer: Issuer string (``iss``).
    :param issued_at: Issuance instant (``iat``).
    :param not_before: Earliest valid instant (``nbf``).
    :param expires_at: Expiry instant (``exp``).
    :param role: Subject role; only present on access tokens.
    :param device_id: Optional device identifier (carried, not enforced).
    :param client_id: Optional client application identifier (carried, not enforced).
    """

    token_id: str
    user_id: int
    email: str
    kind: TokenKind
    issuer: str
    issued_at: datetime
    not_before: datetime
    expires_at: datetime
    role: str | None = None
    device_id: str | None = None
    client_id: str | None = None

    @property
    def subject(self) -> str:
        """Return the ``sub`` claim value."""
        return str(self.user_id)


# ---------------------------- Metadata ------------------------------------ #


@dataclass(frozen=True, slots=True)
class TokenMetadataRecord:
    """
    Read model for a persisted token metadata row.

    :param id: Token identifier (equals the ``jti`` claim).
    :param user_id: Owning user.
    :param kind: Token kind.
    :param created_at: Persistence instant.
    :param expires_at: Expiry, identical to the signed ``exp`` claim.
    :param is_revoked: Revocation flag; never flips back to ``False``.
    :param device_id: Optional device identifier.
    :param client_id: Optional client identifier.
    :param last_used_at: Last successful validation, ``None`` until first use.
    """

    id: str
    user_id: int
    kind: TokenKind
    created_at: datetime
    expires_at: datetime
    is_revoked: bool = False
    device_id: str | None = None
    client_id: str | None = None
    last_used_at: datetime | None = None

    @classmethod
    def for_claims(cls, claims: TokenClaims, *, created_at: datetime) -> TokenMetadataRecord:
        """Build the initial (non-revoked) record for freshly signed claims."""
        return cls(
            id=claims.token_id,
            user_id=claims.user_id,
            kind=claims.kind,
            created_at=created_at,
            expires_at=claims.expires_at,
            device_id=claims.device_id,
            client_id=claims.client_id,
        )

    def is_active(self, at: datetime) -> bool:
        """Return ``True`` when not revoked and not yet expired at ``at``."""
        return not self.is_revoked and self.expires_at > at


# ---------------------------- Users --------------------------------------- #


@dataclass(frozen=True, slots=True)
class UserIdentity:
    """
    Subset of a user record the token engine needs.

    :param id: User identifier.
    :param email: Current email.
    :param role: Current role.
    """

    id: int
    email: str
    role: str = "user"


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class IssuedToken:
    """
    A single signed token together with its identifier and expiry.

    :param token: Encoded token string.
    :param token_id: Identifier (``jti``).
    :param expires_at: Expiry instant.
    :param issued_at: Issuance instant.
    """

    token: str
    token_id: str
    expires_at: datetime
    issued_at: datetime
    token_type: str = field(default=BEARER)

    @property
    def expires_in(self) -> int:
        """Lifetime in seconds, as advertised to clients."""
        return int((self.expires_at - self.issued_at).total_seconds())


@dataclass(frozen=True, slots=True)
class TokenPair:
    """
    Access and refresh tokens issued together for the same subject.

    Both carry distinct identifiers and independently revocable metadata.
    """

    access: IssuedToken
    refresh: IssuedToken

    @property
    def access_token(self) -> str:
        return self.access.token

    @property
    def refresh_token(self) -> str:
        return self.refresh.token

    @property
    def token_type(self) -> str:
        return BEARER

    @property
    def expires_in(self) -> int:
        return self.access.expires_in

    @property
    def refresh_expires_in(self) -> int:
        return self.refresh.expires_in


# ------------------------ Config DTO -------------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenConfig:
    """
    Token emission configuration.

    :param issuer: Value of the ``iss`` claim.
    :param access_expires: Access token lifetime.
    :param refresh_expires: Refresh token lifetime.
    """

    issuer: str
    access_expires: timedelta = DEFAULT_ACCESS_LIFETIME
    refresh_expires: timedelta = DEFAULT_REFRESH_LIFETIME

    def __post_init__(self) -> None:
        if not self.issuer:
            raise ValueError("Token issuer must be a non-empty string.")
        if self.access_expires <= timedelta(0) or self.refresh_expires <= timedelta(0):
            raise ValueError("Token lifetimes must be positive.")


@dataclass(frozen=True, slots=True)
class TokenStats:
    """Aggregate counters over the metadata table."""

    total: int
    active: int
    revoked: int
    expired: int
    access: int
    refresh: int
