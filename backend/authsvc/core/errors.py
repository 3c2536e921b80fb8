"""Problem Details (RFC 7807) responses for every error the API can raise.

Handlers never echo exception text from the database or from token
decoding; clients get a stable ``code`` plus a safe ``detail`` while the
real cause goes to the log with the request's correlation id.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, has_request_context, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from authsvc.core.logger import ensure_request_id

log = logging.getLogger(__name__)

PROBLEM_MIMETYPE = "application/problem+json"


def status_code_name(status: int) -> str:
    """Snake-case code for a status, e.g. ``405 -> "method_not_allowed"``."""
    try:
        return HTTPStatus(status).name.lower()
    except ValueError:
        return "error"


def build_problem(
    status: int,
    code: str,
    detail: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Assemble a problem document for the current request.

    :param status: HTTP status code.
    :param code: Stable machine-readable code.
    :param detail: Client-safe explanation.
    :param details: Optional structured payload, e.g. field errors.
    :returns: Problem+JSON body including ``request_id``.
    """
    body: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": int(status),
        "detail": detail,
        "instance": request.path if has_request_context() else None,
        "code": code,
        "request_id": ensure_request_id(),
    }
    if details:
        body["details"] = details
    return body


def _respond(body: dict[str, Any]) -> tuple[Response, int]:
    resp = jsonify(body)
    resp.mimetype = PROBLEM_MIMETYPE
    return resp, int(body["status"])


class APIError(Exception):
    """
    Error raised by views and translated service errors.

    :param message: Client-facing ``detail``.
    :param status_code: HTTP status, ``400`` by default.
    :param code: Machine-readable code.
    :param details: Optional structured payload.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "bad_request",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.details = details or {}

    def to_problem(self) -> dict[str, Any]:
        return build_problem(self.status_code, self.code, self.message, self.details or None)


class _StatusError(APIError):
    status: HTTPStatus = HTTPStatus.BAD_REQUEST
    default_message = "Bad request"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message or self.default_message,
            status_code=self.status,
            code=status_code_name(self.status),
        )


class NotFound(_StatusError):
    status = HTTPStatus.NOT_FOUND
    default_message = "Resource not found"


class Conflict(_StatusError):
    status = HTTPStatus.CONFLICT
    default_message = "Conflict"


class Unauthorized(_StatusError):
    status = HTTPStatus.UNAUTHORIZED
    default_message = "Unauthorized"


class ServiceUnavailable(_StatusError):
    """Raised when the token store cannot complete the call; safe to retry."""

    status = HTTPStatus.SERVICE_UNAVAILABLE
    default_message = "Service temporarily unavailable"


def _log_problem(body: dict[str, Any], label: str, *, exc_info: bool = False, **extra: Any) -> None:
    level = logging.ERROR if body["status"] >= 500 else logging.WARNING
    log.log(
        level,
        "%s: code=%s status=%s detail=%s",
        label,
        body["code"],
        body["status"],
        body["detail"],
        exc_info=exc_info,
        extra={"status": body["status"], **extra},
    )


def handle_api_error(err: APIError):
    body = err.to_problem()
    _log_problem(body, type(err).__name__)
    return _respond(body)


def handle_service_error(err: Exception):
    """Translate a service error; the log keeps the real reason, the client does not."""
    from authsvc.services._shared.base import BaseService

    translated = BaseService.translate_exceptions(err)
    if not isinstance(translated, APIError):  # pragma: no cover - mapping is total
        raise err
    body = translated.to_problem()
    _log_problem(body, f"{type(err).__name__}: {err}", reason=type(err).__name__)
    return _respond(body)


def handle_http_exception(err: HTTPException):
    status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
    if status == HTTPStatus.NOT_FOUND and has_request_context():
        detail = f"Route '{request.path}' not found"
    else:
        detail = (err.description or HTTPStatus(status).phrase).strip()
    body = build_problem(status, status_code_name(status), detail)
    _log_problem(body, "HTTPException")
    return _respond(body)


def handle_validation_error(err: MarshmallowValidationError):
    body = build_problem(
        HTTPStatus.UNPROCESSABLE_ENTITY,
        "validation_error",
        "Validation failed",
        {"errors": err.messages},
    )
    _log_problem(body, "ValidationError")
    return _respond(body)


# Database failures that escaped the service layer; raw driver text stays in the log
_DB_ERRORS: dict[type[Exception], tuple[HTTPStatus, str]] = {
    IntegrityError: (HTTPStatus.CONFLICT, "Resource conflict"),
    OperationalError: (HTTPStatus.SERVICE_UNAVAILABLE, "Service temporarily unavailable"),
}


def handle_database_error(err: Exception):
    status, detail = next(
        (v for k, v in _DB_ERRORS.items() if isinstance(err, k)),
        (HTTPStatus.INTERNAL_SERVER_ERROR, "Unexpected error"),
    )
    body = build_problem(status, status_code_name(status), detail)
    _log_problem(body, type(err).__name__, exc_info=True)
    return _respond(body)


def handle_unexpected_error(err: Exception):
    body = build_problem(HTTPStatus.INTERNAL_SERVER_ERROR, "internal_server_error", "Unexpected error")
    _log_problem(body, "Unhandled exception", exc_info=True)
    return _respond(body)


def init_app(app: Flask) -> None:
    """Register the problem+json handlers, most specific first."""
    from authsvc.services._shared.errors import ServiceError

    app.register_error_handler(APIError, handle_api_error)
    app.register_error_handler(ServiceError, handle_service_error)
    app.register_error_handler(HTTPException, handle_http_exception)
    app.register_error_handler(MarshmallowValidationError, handle_validation_error)
    for db_error in _DB_ERRORS:
        app.register_error_handler(db_error, handle_database_error)
    app.register_error_handler(Exception, handle_unexpected_error)
