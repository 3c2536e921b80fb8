"""Token metadata repository: single-statement writes and per-user queries."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import Select, case, delete, func, select, update

from authsvc.models.token_metadata import TokenMetadata
from authsvc.repositories.base import BaseRepository


class TokenMetadataRepository(BaseRepository[TokenMetadata]):
    """Persistence-only repository for :class:`TokenMetadata`.

    Flag updates and deletions are issued as single ``UPDATE``/``DELETE``
    statements so concurrent writers never lose a revocation.
    """

    model = TokenMetadata

    def _filterable_fields(self):
        return {
            "user_id": TokenMetadata.user_id,
            "token_type": TokenMetadata.token_type,
            "is_revoked": TokenMetadata.is_revoked,
        }

    # ------------------------------- Writes ----------------------------------

    def revoke(self, token_id: str) -> bool:
        """Set ``is_revoked`` on one row.

        :returns: ``True`` when the row exists (revoked before or now).
        """
        stmt = (
            update(TokenMetadata)
            .where(TokenMetadata.id == token_id)
            .values(is_revoked=True)
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount > 0

    def revoke_all_for_user(self, user_id: int) -> int:
        """Revoke every still-valid row of a user; returns the number changed."""
        stmt = (
            update(TokenMetadata)
            .where(TokenMetadata.user_id == user_id, TokenMetadata.is_revoked.is_(False))
            .values(is_revoked=True)
            .execution_options(synchronize_session=False)
        )
        return int(self.session.execute(stmt).rowcount)

    def touch(self, token_id: str, used_at: datetime) -> bool:
        stmt = (
            update(TokenMetadata)
            .where(TokenMetadata.id == token_id)
            .values(last_used_at=used_at)
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount > 0

    def delete_expired(self, before: datetime) -> int:
        """Delete rows whose ``expires_at`` is strictly before ``before``."""
        stmt = (
            delete(TokenMetadata)
            .where(TokenMetadata.expires_at < before)
            .execution_options(synchronize_session=False)
        )
        return int(self.session.execute(stmt).rowcount)

    # ------------------------------- Reads -----------------------------------

    def _for_user(
        self,
        stmt: Select[Any],
        user_id: int,
        *,
        active_at: datetime | None,
        token_type: str | None,
    ) -> Select[Any]:
        stmt = stmt.where(TokenMetadata.user_id == user_id)
        if token_type is not None:
            stmt = stmt.where(TokenMetadata.token_type == token_type)
        if active_at is not None:
            stmt = stmt.where(
                TokenMetadata.is_revoked.is_(False),
                TokenMetadata.expires_at > active_at,
            )
        return stmt

    def list_for_user(
        self,
        user_id: int,
        *,
        active_at: datetime | None = None,
        token_type: str | None = None,
    ) -> list[TokenMetadata]:
        """List a user's rows, newest first."""
        stmt = self._for_user(
            select(TokenMetadata), user_id, active_at=active_at, token_type=token_type
        ).order_by(TokenMetadata.created_at.desc(), TokenMetadata.id.desc())
        return list(self.session.execute(stmt).scalars().all())

    def count_for_user(
        self,
        user_id: int,
        *,
        active_at: datetime | None = None,
        token_type: str | None = None,
    ) -> int:
        stmt = self._for_user(
            select(func.count()).select_from(TokenMetadata),
            user_id,
            active_at=active_at,
            token_type=token_type,
        )
        return int(self.session.execute(stmt).scalar_one())

    def stats(self, at: datetime) -> dict[str, int]:
        """Aggregate counters over the whole table, evaluated at ``at``."""

        def _sum(condition: Any) -> Any:
            return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)

        stmt = select(
            func.count().label("total"),
            _sum(
                TokenMetadata.is_revoked.is_(False) & (TokenMetadata.expires_at > at)
            ).label("active"),
            _sum(TokenMetadata.is_revoked.is_(True)).label("revoked"),
            _sum(TokenMetadata.expires_at <= at).label("expired"),
            _sum(TokenMetadata.token_type == "access").label("access"),
            _sum(TokenMetadata.token_type == "refresh").label("refresh"),
        ).select_from(TokenMetadata)
        row = self.session.execute(stmt).one()
        return {key: int(value or 0) for key, value in row._mapping.items()}
