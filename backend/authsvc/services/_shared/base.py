"""Shared plumbing for application services: units of work and error mapping."""

from __future__ import annotations

from authsvc.core import errors as api_errors
from authsvc.services._shared.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ServiceError,
    TokenError,
    TokenPersistenceError,
    UserNotFoundError,
)
from authsvc.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

# Single client-facing message for every token rejection reason
INVALID_TOKEN_MESSAGE = "Invalid or expired token"

# First match wins, so subclasses precede their bases
_TRANSLATIONS: tuple[tuple[type[ServiceError], type[api_errors.APIError], str | None], ...] = (
    (TokenError, api_errors.Unauthorized, INVALID_TOKEN_MESSAGE),
    (UserNotFoundError, api_errors.Unauthorized, INVALID_TOKEN_MESSAGE),
    (AuthenticationError, api_errors.Unauthorized, None),
    (NotFoundError, api_errors.NotFound, None),
    (ConflictError, api_errors.Conflict, None),
    (TokenPersistenceError, api_errors.ServiceUnavailable, None),
)


class BaseService:
    """
    Parent of the services behind the HTTP views.

    Services open a unit of work per use case and never reach for the
    Flask-scoped session directly. Errors they raise stay framework-free;
    :meth:`translate_exceptions` turns them into API errors at the edge.
    """

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork()

    def ro_uow(self) -> SQLAlchemyReadOnlyUnitOfWork:
        return SQLAlchemyReadOnlyUnitOfWork()

    @staticmethod
    def translate_exceptions(exc: Exception) -> Exception:
        """
        Map a service error onto the API error the client will see.

        All token rejections, including a subject whose account is gone,
        become the same 401 so the response never reveals which check
        failed. Unmapped :class:`ServiceError` subclasses become a 400;
        anything else is returned unchanged.

        :param exc: Exception raised by a service.
        :returns: The API error to raise instead, or ``exc`` itself.
        """
        for source, target, message in _TRANSLATIONS:
            if isinstance(exc, source):
                return target(message or str(exc))
        if isinstance(exc, ServiceError):
            return api_errors.APIError(str(exc), status_code=400, code="bad_request")
        return exc
