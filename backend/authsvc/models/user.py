"""Accounts that log in and own tokens."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Final

from sqlalchemy import Boolean, CheckConstraint, Index, String, UniqueConstraint, true
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates
from werkzeug.security import check_password_hash, generate_password_hash

from authsvc.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .token_metadata import TokenMetadata

ROLES: Final[tuple[str, ...]] = ("user", "manager", "admin")


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    An account tokens are issued for.

    ``email`` is stored trimmed and lowercased and is unique. ``role`` must be
    one of :data:`ROLES` and is copied into access tokens at issue time, so a
    role change only reaches clients on their next access token. Passwords are
    write-only: assign ``password`` and the hash is stored in ``password_hash``.
    Deleting a user deletes its token metadata too.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(254), nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(100))
    last_name: Mapped[str | None] = mapped_column(String(100))
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="user")
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )

    tokens: Mapped[list[TokenMetadata]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        CheckConstraint("role IN ('user', 'manager', 'admin')", name="role"),
        Index("ix_users_email", "email"),
    )

    @property
    def password(self) -> Any:  # pragma: no cover - write-only
        raise AttributeError("Password is write-only.")

    @password.setter
    def password(self, raw: str) -> None:
        if not raw or not isinstance(raw, str):
            raise ValueError("Password must be a non-empty string.")
        self.password_hash = generate_password_hash(raw)

    def verify_password(self, raw: str) -> bool:
        """Check ``raw`` against the stored hash; ``False`` when none is set."""
        return bool(self.password_hash) and check_password_hash(self.password_hash, raw)

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)

    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        :raises ValueError: If the address is empty or has no ``@`` and dotted domain.
        """
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Email is required.")
        normalized = value.strip().lower()
        local, at, domain = normalized.rpartition("@")
        # Deliverability is the schema's concern; this only catches garbage
        if not at or not local or "." not in domain:
            raise ValueError("Email format looks invalid.")
        return normalized

    @validates("role")
    def _validate_role(self, key: str, value: str) -> str:
        if value not in ROLES:
            raise ValueError(f"Role must be one of {', '.join(ROLES)}.")
        return value
