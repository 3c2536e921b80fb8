# comments in English; reST docstrings
from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from authsvc.models.token_metadata import TokenMetadata
from authsvc.services._shared.errors import TokenPersistenceError
from authsvc.services._shared.ports import TokenMetadataStore
from authsvc.services.tokens.dto import TokenKind, TokenMetadataRecord, TokenStats
from authsvc.uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

logger = logging.getLogger(__name__)


def _to_record(row: TokenMetadata) -> TokenMetadataRecord:
    return TokenMetadataRecord(
        id=row.id,
        user_id=row.user_id,
        kind=TokenKind(row.token_type),
        created_at=row.created_at,
        expires_at=row.expires_at,
        is_revoked=bool(row.is_revoked),
        device_id=row.device_id,
        client_id=row.client_id,
        last_used_at=row.last_used_at,
    )


def _to_row(record: TokenMetadataRecord) -> TokenMetadata:
    return TokenMetadata(
        id=record.id,
        user_id=record.user_id,
        token_type=record.kind.value,
        device_id=record.device_id,
        client_id=record.client_id,
        is_revoked=record.is_revoked,
        created_at=record.created_at,
        expires_at=record.expires_at,
        last_used_at=record.last_used_at,
    )


@dataclass(slots=True)
class SQLAlchemyTokenMetadataStore(TokenMetadataStore):
    """
    Relational token metadata store on top of the Unit of Work.

    Every call runs in its own unit of work: writes commit before returning,
    reads never write. Rows are mapped to :class:`TokenMetadataRecord` inside
    the scope so nothing ORM-bound leaks to callers.

    :param rw_uow: Factory of read-write units of work.
    :param ro_uow: Factory of read-only units of work.
    """

    rw_uow: Callable[[], SQLAlchemyUnitOfWork] = SQLAlchemyUnitOfWork
    ro_uow: Callable[[], SQLAlchemyReadOnlyUnitOfWork] = SQLAlchemyReadOnlyUnitOfWork

    # -------------------- writes ---------------------

    def save(self, record: TokenMetadataRecord) -> None:
        self.save_many([record])

    def save_many(self, records: Sequence[TokenMetadataRecord]) -> None:
        """
        Insert all records in one transaction.

        :raises TokenPersistenceError: If the insert or commit fails; nothing is stored.
        """
        try:
            with self.rw_uow() as uow:
                uow.tokens.add_all(_to_row(r) for r in records)
        except SQLAlchemyError as exc:
            logger.error(
                "Token metadata insert failed", extra={"count": len(records)}, exc_info=True
            )
            raise TokenPersistenceError() from exc

    def revoke(self, token_id: str) -> bool:
        with self.rw_uow() as uow:
            return uow.tokens.revoke(token_id)

    def revoke_all_for_user(self, user_id: int) -> int:
        with self.rw_uow() as uow:
            return uow.tokens.revoke_all_for_user(user_id)

    def update_last_used(self, token_id: str, used_at: datetime) -> bool:
        with self.rw_uow() as uow:
            return uow.tokens.touch(token_id, used_at)

    def delete_expired(self, before: datetime) -> int:
        with self.rw_uow() as uow:
            return uow.tokens.delete_expired(before)

    # -------------------- reads ----------------------

    def get(self, token_id: str) -> TokenMetadataRecord | None:
        with self.ro_uow() as uow:
            row = uow.tokens.get(token_id)
            return _to_record(row) if row is not None else None

    def is_revoked(self, token_id: str) -> bool | None:
        record = self.get(token_id)
        return None if record is None else record.is_revoked

    def list_for_user(
        self,
        user_id: int,
        *,
        active_at: datetime | None = None,
        kind: TokenKind | None = None,
    ) -> list[TokenMetadataRecord]:
        with self.ro_uow() as uow:
            rows = uow.tokens.list_for_user(
                user_id,
                active_at=active_at,
                token_type=kind.value if kind is not None else None,
            )
            return [_to_record(row) for row in rows]

    def count_for_user(
        self,
        user_id: int,
        *,
        active_at: datetime | None = None,
        kind: TokenKind | None = None,
    ) -> int:
        with self.ro_uow() as uow:
            return uow.tokens.count_for_user(
                user_id,
                active_at=active_at,
                token_type=kind.value if kind is not None else None,
            )

    def stats(self, at: datetime) -> TokenStats:
        with self.ro_uow() as uow:
            return TokenStats(**uow.tokens.stats(at))
