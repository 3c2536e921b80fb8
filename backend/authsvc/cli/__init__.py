"""``flask`` sub-commands shipped with the service."""

from __future__ import annotations

from flask import Flask

from .tokens import tokens_cli

COMMAND_GROUPS = (tokens_cli,)


def init_app(app: Flask) -> None:
    """Attach the maintenance command groups (``flask tokens ...``) to ``app.cli``."""
    for group in COMMAND_GROUPS:
        app.cli.add_command(group)
