"""factory_boy base wired to the per-test SAVEPOINT session."""

from __future__ import annotations

import factory


class FactorySession:
    """Holder for the session the ``session`` fixture opens for each test."""

    current = None

    @classmethod
    def bind(cls, session) -> None:
        cls.current = session

    @classmethod
    def get(cls):
        if cls.current is None:
            raise RuntimeError("No factory session bound; request the 'session' fixture.")
        return cls.current


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Flushes on create so ids exist; tests commit when a UoW must see the rows."""

    class Meta:
        abstract = True
        sqlalchemy_session_factory = FactorySession.get
        sqlalchemy_session_persistence = "flush"
