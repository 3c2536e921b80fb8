# tests/unit/services/test_token_issuer.py
from __future__ import annotations

from datetime import timedelta

import pytest
from authsvc.services._shared.errors import TokenPersistenceError
from authsvc.services._shared.ports import InMemoryTokenMetadataStore
from authsvc.services.tokens.dto import TokenKind, TokenPair
from authsvc.services.tokens.issuer import TokenIssuer, new_token_id
from tests.helpers.tokens import T0


class _BrokenStore(InMemoryTokenMetadataStore):
    """Store refusing every insert, as a database outage would."""

    def __init__(self, exc: Exception) -> None:
        super().__init__()
        self.exc = exc

    def save_many(self, records):
        raise self.exc


# ------------------------------ Fixtures ---------------------------------- #
@pytest.fixture()
def issuer(codec, memory_store, token_config) -> TokenIssuer:
    return TokenIssuer(codec, memory_store, token_config, clock=lambda: T0)


# -------------------------------- Tests ----------------------------------- #
def test_new_token_id_is_unique():
    assert len({new_token_id() for _ in range(100)}) == 100


def test_issue_returns_pair_with_distinct_ids(issuer, identity):
    pair = issuer.issue(identity)

    assert isinstance(pair, TokenPair)
    assert pair.access.token_id != pair.refresh.token_id
    assert pair.access_token != pair.refresh_token
    assert pair.token_type == "Bearer"


def test_issue_applies_configured_lifetimes(issuer, identity):
    pair = issuer.issue(identity)

    assert pair.access.issued_at == T0
    assert pair.access.expires_at == T0 + timedelta(minutes=15)
    assert pair.refresh.expires_at == T0 + timedelta(hours=168)
    assert pair.expires_in == 15 * 60
    assert pair.refresh_expires_in == 168 * 3600


def test_issue_embeds_subject_and_kind(issuer, codec, identity, freeze_time):
    pair = issuer.issue(identity)

    with freeze_time(T0.isoformat()):
        access = codec.decode(pair.access_token)
        refresh = codec.decode(pair.refresh_token)

    assert access.user_id == refresh.user_id == 42
    assert access.email == refresh.email == "a@b.com"
    assert access.kind is TokenKind.ACCESS
    assert refresh.kind is TokenKind.REFRESH
    assert access.role == "user"
    assert refresh.role is None
    assert access.issued_at == access.not_before == T0


def test_issue_persists_one_record_per_token(issuer, memory_store, identity):
    pair = issuer.issue(identity, device_id="dev-1", client_id="web")

    access = memory_store.get(pair.access.token_id)
    refresh = memory_store.get(pair.refresh.token_id)
    assert access is not None and refresh is not None
    assert access.kind is TokenKind.ACCESS
    assert refresh.kind is TokenKind.REFRESH
    assert access.is_revoked is refresh.is_revoked is False
    assert access.created_at == T0
    assert access.expires_at == pair.access.expires_at
    assert refresh.expires_at == pair.refresh.expires_at
    assert access.device_id == refresh.device_id == "dev-1"
    assert access.client_id == refresh.client_id == "web"
    assert access.last_used_at is None


def test_issue_twice_gives_independent_pairs(issuer, memory_store, identity):
    first = issuer.issue(identity)
    second = issuer.issue(identity)

    ids = {first.access.token_id, first.refresh.token_id, second.access.token_id,
           second.refresh.token_id}
    assert len(ids) == 4
    assert memory_store.count_for_user(42) == 4


def test_issue_truncates_clock_to_seconds(codec, memory_store, token_config, identity):
    issuer = TokenIssuer(
        codec, memory_store, token_config, clock=lambda: T0.replace(microsecond=987654)
    )
    pair = issuer.issue(identity)
    assert pair.access.issued_at == T0
    assert memory_store.get(pair.access.token_id).created_at == T0


@pytest.mark.parametrize(
    "exc",
    [RuntimeError("db down"), TokenPersistenceError("Failed to persist token metadata")],
)
def test_issue_fails_when_metadata_cannot_be_stored(codec, token_config, identity, exc):
    store = _BrokenStore(exc)
    issuer = TokenIssuer(codec, store, token_config, clock=lambda: T0)

    with pytest.raises(TokenPersistenceError):
        issuer.issue(identity)
    assert store.count_for_user(identity.id) == 0


def test_issue_access_stores_a_single_access_record(issuer, memory_store, identity):
    issued = issuer.issue_access(identity, client_id="cli")

    record = memory_store.get(issued.token_id)
    assert record is not None
    assert record.kind is TokenKind.ACCESS
    assert record.client_id == "cli"
    assert issued.expires_in == 15 * 60
    assert memory_store.count_for_user(identity.id) == 1
