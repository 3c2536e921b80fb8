"""Account lookups backing login and token issuance."""

from __future__ import annotations

from typing import cast

from sqlalchemy import Select, select

from authsvc.models.user import User
from authsvc.repositories.base import BaseRepository


def _email_key(email: str) -> str:
    # Mirrors the normalisation applied by ``User._normalize_email``
    return email.strip().lower()


class UserRepository(BaseRepository[User]):
    """Queries over :class:`User` rows.

    Credentials are checked here; issuing tokens for the result is the
    service layer's business.
    """

    model = User

    def _filterable_fields(self):
        return {
            "email": User.email,
            "role": User.role,
            "is_active": User.is_active,
        }

    def _by_email(self, email: str) -> Select[tuple[User]]:
        return select(User).where(User.email == _email_key(email))

    def get_by_email(self, email: str) -> User | None:
        """Look up an account by login email, ignoring case and padding.

        :param email: Raw email as typed by the client.
        :returns: The matching user or ``None``.
        """
        return cast(User | None, self.session.scalars(self._by_email(email)).first())

    def exists_by_email(self, email: str) -> bool:
        stmt = self._by_email(email).with_only_columns(User.id).limit(1)
        return self.session.scalar(stmt) is not None

    def authenticate(self, email: str, password: str) -> User | None:
        """Resolve credentials to an active account.

        Unknown emails, wrong passwords and disabled accounts all yield
        ``None`` so callers cannot tell them apart.
        """
        user = self.get_by_email(email)
        if user is None or not user.is_active:
            return None
        return user if user.verify_password(password) else None
