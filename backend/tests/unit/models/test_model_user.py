"""Model-level tests for :class:`authsvc.models.user.User`."""

from __future__ import annotations

import pytest
from authsvc.models.token_metadata import TokenMetadata
from authsvc.models.user import User
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from tests.factories.token_metadata import TokenMetadataFactory
from tests.factories.user import UserFactory


class TestUserModel:
    def test_email_is_normalized(self, session):
        user = UserFactory(email="  Alice@Example.COM ")
        session.flush()
        assert user.email == "alice@example.com"

    @pytest.mark.parametrize("email", ["", "no-at-sign", "a@nodot"])
    def test_invalid_email_is_rejected(self, email):
        with pytest.raises(ValueError):
            User(email=email)

    def test_unique_email(self, session):
        UserFactory(email="dup@example.com")
        with pytest.raises(IntegrityError):
            UserFactory(email="DUP@example.com")
        session.rollback()

    def test_role_must_be_known(self):
        with pytest.raises(ValueError, match="Role must be one of"):
            User(email="x@example.com", role="root")

    def test_password_is_hashed_and_write_only(self, session):
        user = UserFactory(password="s3cret-pass")
        session.flush()

        assert user.password_hash != "s3cret-pass"
        assert user.verify_password("s3cret-pass") is True
        assert user.verify_password("wrong") is False
        with pytest.raises(AttributeError):
            _ = user.password

    def test_empty_password_is_rejected(self):
        user = User(email="x@example.com")
        with pytest.raises(ValueError):
            user.password = ""

    def test_full_name_skips_missing_parts(self):
        assert User(email="x@example.com", first_name="Ada").full_name == "Ada"
        assert (
            User(email="x@example.com", first_name="Ada", last_name="Lovelace").full_name
            == "Ada Lovelace"
        )

    def test_defaults(self, session):
        user = User(email="plain@example.com", password="whatever1")
        session.add(user)
        session.flush()
        session.refresh(user)

        assert user.role == "user"
        assert user.is_active is True
        assert user.created_at is not None
        assert user.created_at.tzinfo is not None

    def test_deleting_user_removes_tokens(self, session):
        token = TokenMetadataFactory()
        token_id = token.id
        session.flush()

        session.delete(token.user)
        session.flush()
        # The cascade runs in the database; drop the stale row from the identity map
        session.expunge_all()

        stmt = select(TokenMetadata).where(TokenMetadata.id == token_id)
        assert session.scalars(stmt).first() is None
