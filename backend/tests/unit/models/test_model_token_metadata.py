"""Model-level tests for :class:`authsvc.models.token_metadata.TokenMetadata`."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest
from authsvc.models.token_metadata import TokenMetadata
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from tests.factories.token_metadata import BASE_TIME, TokenMetadataFactory


class TestTokenMetadataModel:
    def test_defaults(self, session):
        token = TokenMetadataFactory()
        session.flush()
        session.refresh(token)

        assert token.is_revoked is False
        assert token.last_used_at is None
        assert token.expires_at == BASE_TIME + timedelta(minutes=15)

    def test_datetimes_load_as_utc(self, session):
        token = TokenMetadataFactory()
        session.commit()
        session.expire_all()

        loaded = session.execute(
            select(TokenMetadata).where(TokenMetadata.id == token.id)
        ).scalar_one()
        assert loaded.created_at == BASE_TIME
        assert loaded.created_at.utcoffset() == timedelta(0)

    def test_naive_datetimes_are_taken_as_utc(self, session):
        token = TokenMetadataFactory(
            created_at=datetime(2024, 1, 1), expires_at=datetime(2024, 1, 1, 0, 15)
        )
        session.commit()
        session.expire_all()

        assert token.created_at == BASE_TIME
        assert token.expires_at.tzinfo is not None

    def test_token_type_is_constrained(self, session):
        with pytest.raises(IntegrityError):
            TokenMetadataFactory(token_type="id")
        session.rollback()

    def test_expiry_must_follow_creation(self, session):
        with pytest.raises(IntegrityError):
            TokenMetadataFactory(expires_at=BASE_TIME - timedelta(seconds=1))
        session.rollback()

    def test_repr(self, session):
        token = TokenMetadataFactory(id="abc")
        assert repr(token) == "<TokenMetadata id=abc>"
