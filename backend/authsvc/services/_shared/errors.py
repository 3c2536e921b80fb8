"""
Exceptions raised by the service layer and the token stores behind it.

Nothing here knows about HTTP. :meth:`BaseService.translate_exceptions`
maps each type onto an API error at the edge; every :class:`TokenError`
collapses to the same 401 there, while the concrete subclass keeps the
precise rejection reason for logs and tests.
"""

from __future__ import annotations

from dataclasses import dataclass


class ServiceError(Exception):
    """Root of every error a service may raise on purpose."""


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """A lookup by ``key`` found no ``entity``."""

    entity: str
    key: str | int

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


class UserNotFoundError(NotFoundError):
    """Raised when a token subject no longer resolves to a user."""

    def __init__(self, key: str | int) -> None:
        super().__init__("User", key)


@dataclass(slots=True)
class ConflictError(ServiceError):
    """Creating ``entity`` would clash with existing data, e.g. a taken email."""

    entity: str
    detail: str

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


class AuthenticationError(ServiceError):
    """Raised when credentials do not match an active user."""

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)


# --------------------------------------------------------------------------- #
# Token lifecycle errors
# --------------------------------------------------------------------------- #


class TokenPersistenceError(ServiceError):
    """
    Raised when token metadata could not be stored.

    Tokens signed during the failed call must be discarded; the caller retries
    issuance instead of reusing them.
    """

    def __init__(self, message: str = "Failed to persist token metadata") -> None:
        super().__init__(message)


class TokenError(ServiceError):
    """Base class for every reason a presented token is rejected."""

    default_message = "Token rejected"

    def __init__(self, message: str | None = None, *, token_id: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.token_id = token_id


class InvalidTokenError(TokenError):
    """Malformed token, bad signature, algorithm mismatch or bad claims."""

    default_message = "Invalid token"


class TokenExpiredError(InvalidTokenError):
    """The signed ``exp`` claim is in the past."""

    default_message = "Token has expired"


class TokenRevokedError(TokenError):
    """The token's metadata record is flagged as revoked."""

    default_message = "Token has been revoked"


class TokenNotFoundError(TokenError):
    """No metadata record exists for the token identifier."""

    default_message = "Token not found"


class InvalidTokenTypeError(TokenError):
    """The token kind does not fit the operation (e.g. access token used to refresh)."""

    default_message = "Invalid token type"
