"""Generic SQLAlchemy 2.x repository.

Repositories only build and run queries. They flush so generated keys and
constraint violations surface early, but committing belongs to the unit of
work that owns the session.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select, func, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from authsvc.core.extensions import db

E = TypeVar("E")  # mapped entity


class BaseRepository(Generic[E]):
    """Queries for one mapped ``model``.

    Subclasses set :attr:`model` and list the attributes callers may filter on
    in :meth:`_filterable_fields`; filter keys outside that mapping are dropped
    silently, so request data can be passed through without leaking columns
    such as ``password_hash``.
    """

    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        """Session given at construction, else the Flask-scoped one."""
        return self._session if self._session is not None else cast(Session, db.session)

    def _pk_attr(self) -> InstrumentedAttribute[Any] | None:
        return getattr(self.model, "id", None)

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {}

    def _where(self, stmt: Select[Any], filters: Mapping[str, Any] | None) -> Select[Any]:
        allowed = self._filterable_fields()
        for key, value in (filters or {}).items():
            column = allowed.get(key)
            if column is not None:
                stmt = stmt.where(column == value)
        return stmt

    # Writes

    def add(self, instance: E) -> E:
        """Stage ``instance`` and flush so its primary key is populated."""
        self.session.add(instance)
        self.flush()
        return instance

    def add_all(self, instances: Iterable[E]) -> list[E]:
        staged = list(instances)
        self.session.add_all(staged)
        self.flush()
        return staged

    def delete(self, instance: E) -> None:
        self.session.delete(instance)
        self.flush()

    def flush(self) -> None:
        self.session.flush()

    # Reads

    def get(self, entity_id: Any) -> E | None:
        """
        Fetch by primary key.

        :raises RuntimeError: If the model has no ``id`` attribute.
        """
        pk = self._pk_attr()
        if pk is None:
            raise RuntimeError(f"{type(self).__name__}.get needs a model with an 'id' column.")
        return cast(E | None, self.session.scalars(select(self.model).where(pk == entity_id)).first())

    def find_one(self, **filters: Any) -> E | None:
        stmt = self._where(select(self.model), filters)
        return cast(E | None, self.session.scalars(stmt).first())

    def exists(self, **filters: Any) -> bool:
        stmt = self._where(select(func.count()).select_from(self.model), filters)
        return bool(self.session.execute(stmt).scalar_one())

    def list(
        self,
        *,
        filters: Mapping[str, Any] | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[E]:
        """
        Filtered rows in primary-key order.

        :param filters: Public filter keys, see :meth:`_filterable_fields`.
        :param limit: Maximum number of rows.
        :param offset: Rows to skip first.
        """
        stmt = self._where(select(self.model), filters)
        pk = self._pk_attr()
        if pk is not None:
            stmt = stmt.order_by(pk.asc())
        if limit is not None:
            stmt = stmt.limit(int(limit))
        if offset is not None:
            stmt = stmt.offset(int(offset))
        return list(self.session.scalars(stmt).all())
