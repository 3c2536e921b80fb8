from __future__ import annotations

import threading
from typing import Protocol

from authsvc.services.tokens.dto import UserIdentity


class UserDirectory(Protocol):
    """Read-only lookup of the current identity behind a token subject."""

    def get_by_id(self, user_id: int) -> UserIdentity | None: ...


class InMemoryUserDirectory(UserDirectory):
    """Dictionary-backed directory used in unit tests."""

    def __init__(self, users: list[UserIdentity] | None = None) -> None:
        self._users: dict[int, UserIdentity] = {u.id: u for u in users or []}
        self._lock = threading.Lock()

    def add(self, user: UserIdentity) -> None:
        """Insert or replace ``user``."""
        with self._lock:
            self._users[user.id] = user

    def remove(self, user_id: int) -> None:
        with self._lock:
            self._users.pop(user_id, None)

    def get_by_id(self, user_id: int) -> UserIdentity | None:
        return self._users.get(user_id)
