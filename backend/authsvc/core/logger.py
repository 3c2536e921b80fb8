"""Structured logging for the token service.

Every record leaves the process as one JSON object on stdout. Records emitted
while a request is active carry its correlation id, HTTP method and path, so
a rejected token can be traced back to the call that presented it without ever
logging the token itself.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from flask import Flask, Response, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_HEADERS = ("X-Request-ID", "X-Correlation-ID")

# ``extra`` keys copied into the JSON payload when present on a record
AUDIT_KEYS: tuple[str, ...] = (
    "token_id",
    "token_type",
    "user_id",
    "count",
    "reason",
    "endpoint",
    "elapsed_ms",
    "status",
)


def ensure_request_id() -> str:
    """Return the correlation id of the current request, creating it on first use.

    Outside a request a fresh id is returned and nothing is stored.
    """
    if not has_request_context():
        return str(uuid4())
    current = getattr(g, "request_id", None)
    if current:
        return str(current)
    incoming = next(
        (request.headers[h] for h in CORRELATION_HEADERS if request.headers.get(h)), None
    )
    g.request_id = incoming or str(uuid4())
    return str(g.request_id)


class RequestContextFilter(logging.Filter):
    """Attach ``request_id``, ``method`` and ``path`` to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if has_request_context():
            record.request_id = ensure_request_id()
            record.method = request.method
            record.path = request.path
        else:
            record.request_id = None
        return True


class JSONFormatter(logging.Formatter):
    """Render log records as single-line JSON objects.

    :param audit_keys: ``extra`` attributes copied verbatim when present.
    """

    def __init__(self, audit_keys: Iterable[str] = AUDIT_KEYS) -> None:
        super().__init__()
        self.audit_keys = tuple(audit_keys)

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(
                timespec="milliseconds"
            ),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in ("request_id", "method", "path"):
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value
        payload.update(
            {key: getattr(record, key) for key in self.audit_keys if hasattr(record, key)}
        )
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(level: str | int = "INFO") -> None:
    """Route the root logger to stdout through :class:`JSONFormatter`.

    Replaces any handler installed earlier, so calling it twice is harmless.

    :param level: Level name (case-insensitive) or numeric level.
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        level = resolved if isinstance(resolved, int) else logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestContextFilter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)


def init_app(app: Flask) -> None:
    """Seed the correlation id per request and echo it on responses.

    Completed requests are logged at DEBUG with status and duration.
    """
    app.logger.addFilter(RequestContextFilter())
    access_log = logging.getLogger("authsvc.access")

    @app.before_request
    def _start_request() -> None:
        ensure_request_id()
        g.request_started = time.perf_counter()

    @app.after_request
    def _finish_request(response: Response) -> Response:
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        started = g.pop("request_started", None)
        if started is not None:
            access_log.debug(
                "request.completed",
                extra={
                    "status": response.status_code,
                    "endpoint": request.endpoint,
                    "elapsed_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )
        return response


__all__ = [
    "AUDIT_KEYS",
    "JSONFormatter",
    "RequestContextFilter",
    "configure_logging",
    "ensure_request_id",
    "init_app",
]
