"""Liveness/readiness probe."""

from __future__ import annotations

import logging

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from authsvc import __version__
from authsvc.api.deps import json_response
from authsvc.core.extensions import db

bp = Blueprint("health", __name__)
logger = logging.getLogger(__name__)


def _database_ok() -> bool:
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.error("Health check could not reach the database", exc_info=True)
        db.session.rollback()
        return False
    return True


@bp.get("/health")
def healthcheck():
    """
    Report process and database status.

    Answers 503 when the database is unreachable, since no token can be issued
    or validated without it.
    """
    db_ok = _database_ok()
    payload = {
        "status": "ok" if db_ok else "degraded",
        "db": "ok" if db_ok else "fail",
        "version": current_app.config.get("APP_VERSION", __version__),
    }
    return json_response(payload, status=200 if db_ok else 503)
