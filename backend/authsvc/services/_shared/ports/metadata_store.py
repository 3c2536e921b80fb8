from __future__ import annotations

import threading
from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import datetime
from typing import Protocol

from authsvc.services.tokens.dto import TokenKind, TokenMetadataRecord, TokenStats


class TokenMetadataStore(Protocol):
    """
    Durable keyed records of token identity, kind, revocation flag and timestamps.

    Revocation flag updates MUST be atomic single-record writes and MUST be
    monotonic: no operation ever sets ``is_revoked`` back to ``False``.
    """

    def save(self, record: TokenMetadataRecord) -> None:
        """Persist a new record."""

    def save_many(self, records: Sequence[TokenMetadataRecord]) -> None:
        """
        Persist several records atomically: either all of them are stored or none.
        """

    def get(self, token_id: str) -> TokenMetadataRecord | None:
        """Fetch a single record (``None`` when absent)."""

    def is_revoked(self, token_id: str) -> bool | None:
        """Return the revocation flag, or ``None`` when the record is absent."""

    def revoke(self, token_id: str) -> bool:
        """
        Flag a record as revoked.

        :returns: ``False`` if no record exists; ``True`` otherwise (also when it
            was already revoked).
        """

    def revoke_all_for_user(self, user_id: int) -> int:
        """
        Revoke every non-revoked record owned by ``user_id``.

        :returns: Number of records that changed.
        """

    def update_last_used(self, token_id: str, used_at: datetime) -> bool:
        """Record a successful validation. :returns: ``False`` if the record is absent."""

    def delete_expired(self, before: datetime) -> int:
        """
        Delete every record with ``expires_at`` strictly before ``before``.

        :returns: Number of deleted records.
        """

    def list_for_user(
        self,
        user_id: int,
        *,
        active_at: datetime | None = None,
        kind: TokenKind | None = None,
    ) -> list[TokenMetadataRecord]:
        """
        List a user's records, newest first.

        :param active_at: When given, only non-revoked records unexpired at this instant.
        :param kind: Optional kind filter.
        """

    def count_for_user(
        self,
        user_id: int,
        *,
        active_at: datetime | None = None,
        kind: TokenKind | None = None,
    ) -> int:
        """Count records with the same filters as :meth:`list_for_user`."""

    def stats(self, at: datetime) -> TokenStats:
        """Aggregate counters evaluated at ``at``."""


class InMemoryTokenMetadataStore(TokenMetadataStore):
    """
    In-memory metadata store.

    .. note::
       Uses a threading lock to keep each operation atomic, mirroring the
       single-statement guarantees of the relational adapter.
    """

    def __init__(self) -> None:
        self._by_id: dict[str, TokenMetadataRecord] = {}
        self._lock = threading.Lock()

    # ------------------------- helpers -------------------------

    def _matching(
        self,
        user_id: int,
        active_at: datetime | None,
        kind: TokenKind | None,
    ) -> Iterable[TokenMetadataRecord]:
        for record in self._by_id.values():
            if record.user_id != user_id:
                continue
            if kind is not None and record.kind != kind:
                continue
            if active_at is not None and not record.is_active(active_at):
                continue
            yield record

    # -------------------------- API ----------------------------

    def save(self, record: TokenMetadataRecord) -> None:
        self.save_many([record])

    def save_many(self, records: Sequence[TokenMetadataRecord]) -> None:
        with self._lock:
            ids = [r.id for r in records]
            if len(set(ids)) != len(ids) or any(i in self._by_id for i in ids):
                raise ValueError("Duplicate token metadata identifier.")
            for record in records:
                self._by_id[record.id] = record

    def get(self, token_id: str) -> TokenMetadataRecord | None:
        return self._by_id.get(token_id)

    def is_revoked(self, token_id: str) -> bool | None:
        record = self._by_id.get(token_id)
        return None if record is None else record.is_revoked

    def revoke(self, token_id: str) -> bool:
        with self._lock:
            record = self._by_id.get(token_id)
            if record is None:
                return False
            if not record.is_revoked:
                self._by_id[token_id] = replace(record, is_revoked=True)
            return True

    def revoke_all_for_user(self, user_id: int) -> int:
        with self._lock:
            targets = [r for r in self._matching(user_id, None, None) if not r.is_revoked]
            for record in targets:
                self._by_id[record.id] = replace(record, is_revoked=True)
            return len(targets)

    def update_last_used(self, token_id: str, used_at: datetime) -> bool:
        with self._lock:
            record = self._by_id.get(token_id)
            if record is None:
                return False
            self._by_id[token_id] = replace(record, last_used_at=used_at)
            return True

    def delete_expired(self, before: datetime) -> int:
        with self._lock:
            expired = [tid for tid, r in self._by_id.items() if r.expires_at < before]
            for tid in expired:
                del self._by_id[tid]
            return len(expired)

    def list_for_user(
        self,
        user_id: int,
        *,
        active_at: datetime | None = None,
        kind: TokenKind | None = None,
    ) -> list[TokenMetadataRecord]:
        with self._lock:
            records = list(self._matching(user_id, active_at, kind))
        return sorted(records, key=lambda r: (r.created_at, r.id), reverse=True)

    def count_for_user(
        self,
        user_id: int,
        *,
        active_at: datetime | None = None,
        kind: TokenKind | None = None,
    ) -> int:
        with self._lock:
            return sum(1 for _ in self._matching(user_id, active_at, kind))

    def stats(self, at: datetime) -> TokenStats:
        with self._lock:
            records = list(self._by_id.values())
        return TokenStats(
            total=len(records),
            active=sum(1 for r in records if r.is_active(at)),
            revoked=sum(1 for r in records if r.is_revoked),
            expired=sum(1 for r in records if r.expires_at <= at),
            access=sum(1 for r in records if r.kind is TokenKind.ACCESS),
            refresh=sum(1 for r in records if r.kind is TokenKind.REFRESH),
        )
