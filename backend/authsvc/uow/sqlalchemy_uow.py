"""Units of work over the Flask-SQLAlchemy session.

Both variants expose ``users`` and ``tokens`` repositories bound to the same
session, so a use case that touches both sees one transaction.
"""

from __future__ import annotations

import logging

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, scoped_session

from authsvc.core.extensions import db
from authsvc.repositories import TokenMetadataRepository, UserRepository
from authsvc.uow.base import UnitOfWork

log = logging.getLogger(__name__)


class _SessionRepositories:
    def __init__(self, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=session)
        self.tokens = TokenMetadataRepository(session=session)


class SQLAlchemyUnitOfWork(_SessionRepositories, UnitOfWork):
    """Read-write scope; commit and rollback semantics come from :class:`UnitOfWork`."""

    def __init__(self) -> None:
        super().__init__(db.session)

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(_SessionRepositories, UnitOfWork):
    """
    Read-only Unit of Work backed by the Flask-scoped SQLAlchemy session.

    - Blocks ORM flushes of new/dirty/deleted objects while active.
    - Disallows ``commit()``.
    - When it starts the transaction itself it also ends it with a rollback and,
      on PostgreSQL/MySQL, marks it ``READ ONLY``. When a transaction is already
      running it attaches to it and leaves it untouched on exit.
    """

    _READ_ONLY_DIALECTS = ("postgresql", "mysql", "mariadb")

    def __init__(self) -> None:
        super().__init__(db.session)
        self._owns_transaction = False
        self._guard_target: Session | None = None

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        # scoped_session has no in_transaction(); inspect and guard the concrete Session
        target = self.session() if isinstance(self.session, scoped_session) else self.session
        self._owns_transaction = not target.in_transaction()
        event.listen(target, "before_flush", _block_flush)
        self._guard_target = target

        if self._owns_transaction:
            dialect = target.get_bind().dialect.name
            if dialect in self._READ_ONLY_DIALECTS:
                try:
                    target.execute(text("SET TRANSACTION READ ONLY"))
                except SQLAlchemyError as exc:
                    log.warning("SET TRANSACTION READ ONLY failed (%s); guards only.", exc)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._owns_transaction:
                self.rollback()
        finally:
            if self._guard_target is not None:
                event.remove(self._guard_target, "before_flush", _block_flush)
                self._guard_target = None
            self._owns_transaction = False

    def commit(self) -> None:
        """
        :raises RuntimeError: always, to prevent accidental writes.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()


def _block_flush(session, flush_context, instances) -> None:
    if session.new or session.dirty or session.deleted:
        raise RuntimeError(
            "Read-only UnitOfWork: ORM flush blocked (new/dirty/deleted objects present)."
        )
