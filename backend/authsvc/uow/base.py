"""
Abstract Unit of Work contract shared by the read-write and read-only variants.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from authsvc.repositories import TokenMetadataRepository, UserRepository


class UnitOfWork(ABC):
    """
    One transactional scope exposing the repositories a use case needs.

    ``users`` and ``tokens`` share a single session. The default context
    manager commits when the block finishes cleanly and rolls back when it
    raises; read-only variants override :meth:`__exit__`.
    """

    users: UserRepository
    tokens: TokenMetadataRepository

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except Exception:
            self.rollback()
            raise

    @abstractmethod
    def commit(self) -> None:
        """Make the scope's changes durable."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard the scope's changes."""
