"""Flask CLI commands for token metadata maintenance."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

import click
from flask.cli import with_appcontext
from sqlalchemy.exc import SQLAlchemyError

from authsvc.services.tokens.service import get_token_service

LOGGER = logging.getLogger(__name__)


@click.group("tokens")
def tokens_cli() -> None:
    """Token metadata maintenance commands."""


@tokens_cli.command("cleanup")
@click.option(
    "--before",
    type=click.DateTime(formats=["%Y-%m-%dT%H:%M:%S", "%Y-%m-%d"]),
    default=None,
    help="Cutoff instant in UTC (defaults to now).",
)
@with_appcontext
def cleanup_command(before: datetime | None) -> None:
    """Delete metadata of tokens that expired before the cutoff.

    Meant to be scheduled (cron, systemd timer); safe to run repeatedly.
    """
    cutoff = before.replace(tzinfo=UTC) if before is not None else None
    try:
        deleted = get_token_service().cleanup_expired(cutoff)
    except SQLAlchemyError as exc:
        LOGGER.error("Token cleanup failed", exc_info=True)
        raise click.ClickException(f"Cleanup failed: {exc}") from exc
    click.echo(f"Deleted {deleted} expired token record(s).")


@tokens_cli.command("revoke-user")
@click.argument("user_id", type=int)
@with_appcontext
def revoke_user_command(user_id: int) -> None:
    """Revoke every token of USER_ID (log out everywhere)."""
    try:
        revoked = get_token_service().revoke_all_for_user(user_id)
    except SQLAlchemyError as exc:
        LOGGER.error("Bulk revocation failed", extra={"user_id": user_id}, exc_info=True)
        raise click.ClickException(f"Revocation failed: {exc}") from exc
    click.echo(f"Revoked {revoked} token(s) for user {user_id}.")


@tokens_cli.command("stats")
@with_appcontext
def stats_command() -> None:
    """Print token metadata counters."""
    stats = get_token_service().stats()
    click.echo("Token stats:")
    for name in ("total", "active", "revoked", "expired", "access", "refresh"):
        click.echo(f"  {name.ljust(8)} {getattr(stats, name):>6}")
