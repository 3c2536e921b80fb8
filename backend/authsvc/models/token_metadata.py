"""Persisted state of every issued token: kind, lifetime and revocation flag."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, String, false
from sqlalchemy.orm import Mapped, mapped_column, relationship

from authsvc.core.extensions import db

from .base import ReprMixin, UTCDateTime

if TYPE_CHECKING:
    from .user import User


class TokenMetadata(ReprMixin, db.Model):
    """
    One row per issued token, keyed by the token's ``jti``.

    ``is_revoked`` only ever moves from ``False`` to ``True``. Rows are removed
    by the expiry cleanup, or with their owner through ``ON DELETE CASCADE``.
    """

    __tablename__ = "token_metadata"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    token_type: Mapped[str] = mapped_column(String(16), nullable=False)
    device_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    client_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_revoked: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    last_used_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    user: Mapped[User] = relationship(back_populates="tokens")

    __table_args__ = (
        CheckConstraint("token_type IN ('access', 'refresh')", name="token_type"),
        CheckConstraint("expires_at > created_at", name="expires_after_created"),
        Index("ix_token_metadata_user_id", "user_id"),
        Index("ix_token_metadata_expires_at", "expires_at"),
        Index("ix_token_metadata_user_active", "user_id", "is_revoked", "expires_at"),
    )
