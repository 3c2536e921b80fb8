from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from authsvc.services._shared.ports import UserDirectory
from authsvc.services.tokens.dto import UserIdentity
from authsvc.uow import SQLAlchemyReadOnlyUnitOfWork


@dataclass(slots=True)
class SQLAlchemyUserDirectory(UserDirectory):
    """
    Resolve token subjects against the ``users`` table.

    Deactivated users resolve to ``None``: their refresh tokens stop producing
    new access tokens.
    """

    ro_uow: Callable[[], SQLAlchemyReadOnlyUnitOfWork] = SQLAlchemyReadOnlyUnitOfWork

    def get_by_id(self, user_id: int) -> UserIdentity | None:
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None or not user.is_active:
                return None
            return UserIdentity(id=user.id, email=user.email, role=user.role)
