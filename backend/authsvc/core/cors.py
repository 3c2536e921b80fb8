"""Cross-origin policy for browser clients of the token endpoints."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS

# Browsers must be able to send bearer tokens and read the correlation id back
ALLOWED_HEADERS = ("Authorization", "Content-Type", "X-Request-ID")
EXPOSED_HEADERS = ("X-Request-ID",)
ALLOWED_METHODS = ("GET", "POST", "OPTIONS")


def parse_origins(raw: str | None) -> list[str] | str:
    """Turn the comma separated ``CORS_ORIGINS`` setting into a Flask-Cors value.

    :returns: ``"*"`` when the setting is blank or a lone wildcard, otherwise
        the de-duplicated list of origins in their original order.
    """
    origins = list(dict.fromkeys(o.strip() for o in (raw or "").split(",") if o.strip()))
    if not origins or origins == ["*"]:
        return "*"
    return origins


def init_app(app: Flask) -> None:
    """Enable CORS on ``/api/*``.

    Credentials are only allowed for an explicit origin list; a wildcard
    policy never lets a browser attach cookies.
    """
    origins = parse_origins(app.config.get("CORS_ORIGINS"))
    CORS(
        app,
        resources={r"/api/*": {"origins": origins}},
        supports_credentials=origins != "*",
        allow_headers=list(ALLOWED_HEADERS),
        expose_headers=list(EXPOSED_HEADERS),
        methods=list(ALLOWED_METHODS),
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
