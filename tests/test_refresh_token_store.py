"""Tests for the persisted refresh token store."""

from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from session_api.config.settings import Settings
from session_api.core.exceptions import DuplicateTokenIdError, UnavailableError
from session_api.core.time import utcnow
from session_api.entities.refresh_token import DeviceInfo
from session_api.infrastructure.database.session import Database
from session_api.services.refresh_token_store import RefreshTokenStore

from conftest import TEST_PASSWORD, TEST_SECRET


@pytest.fixture
def user_id(services):
    return services.users.create_user(email="owner@example.com", password=TEST_PASSWORD).id


@pytest.fixture
def store(services):
    return services.store


def _create(store, user_id, *, expires_in=timedelta(days=1), token_id=None, expires_at=None):
    return store.create(
        user_id=user_id,
        token_id=token_id or uuid4().hex,
        expires_at=expires_at or utcnow() + expires_in,
        device_info=DeviceInfo(user_agent="pytest", ip="127.0.0.1"),
    )


class TestCreate:
    def test_create_returns_live_record(self, store, user_id):
        record = _create(store, user_id)

        assert record.user_id == user_id
        assert record.revoked is False
        assert record.device_info == DeviceInfo(user_agent="pytest", ip="127.0.0.1")
        assert store.find_live_by_token_id(record.token_id) == record

    def test_duplicate_token_id_is_rejected(self, store, user_id):
        _create(store, user_id, token_id="same-id")

        with pytest.raises(DuplicateTokenIdError):
            _create(store, user_id, token_id="same-id")


class TestFindLive:
    def test_unknown_token_is_not_live(self, store):
        assert store.find_live_by_token_id("never-issued") is None

    def test_expiry_boundary_is_exclusive(self, store, user_id):
        expires_at = datetime(2030, 1, 1, 12, 0, 0)
        record = _create(store, user_id, expires_at=expires_at)

        assert store.find_live_by_token_id(record.token_id, now=expires_at - timedelta(seconds=1)) is not None
        assert store.find_live_by_token_id(record.token_id, now=expires_at) is None
        assert store.find_live_by_token_id(record.token_id, now=expires_at + timedelta(seconds=1)) is None

    def test_revoked_token_is_not_live(self, store, user_id):
        record = _create(store, user_id)
        store.revoke(record.token_id)

        assert store.find_live_by_token_id(record.token_id) is None


class TestRevoke:
    def test_revoke_is_idempotent(self, store, user_id):
        record = _create(store, user_id)

        assert store.revoke(record.token_id) is True
        assert store.revoke(record.token_id) is False

        row = store.get(record.token_id)
        assert row.revoked is True
        assert row.reason == "logout"

    def test_revoking_missing_token_is_silent(self, store):
        assert store.revoke("missing") is False

    def test_revoke_all_counts_only_live_rows(self, store, user_id, services):
        other = services.users.create_user(email="other@example.com", password=TEST_PASSWORD).id
        first = _create(store, user_id)
        _create(store, user_id)
        _create(store, user_id, expires_at=utcnow() - timedelta(minutes=1))
        store.revoke(first.token_id)
        foreign = _create(store, other)

        assert store.revoke_all_for_user(user_id) == 1
        assert store.list_live_for_user(user_id) == []
        assert store.find_live_by_token_id(foreign.token_id) is not None

    def test_revoke_for_user_ignores_foreign_tokens(self, store, user_id, services):
        other = services.users.create_user(email="other@example.com", password=TEST_PASSWORD).id
        record = _create(store, other)

        assert store.revoke_for_user(user_id=user_id, token_id=record.token_id) is False
        assert store.revoke_for_user(user_id=other, token_id=record.token_id) is True


class TestConsume:
    def test_consume_wins_once(self, store, user_id):
        record = _create(store, user_id)

        consumed = store.consume(record.token_id, user_id=user_id, replaced_by_jti="next")
        assert consumed is not None
        assert consumed.revoked is True
        assert consumed.reason == "rotated"
        assert consumed.replaced_by_jti == "next"
        assert consumed.last_used_at is not None

        assert store.consume(record.token_id, user_id=user_id, replaced_by_jti="again") is None

    def test_consume_requires_matching_subject(self, store, user_id):
        record = _create(store, user_id)

        assert store.consume(record.token_id, user_id=user_id + 1, replaced_by_jti="x") is None
        assert store.find_live_by_token_id(record.token_id) is not None

    def test_consume_at_expiry_fails(self, store, user_id):
        expires_at = datetime(2030, 1, 1)
        record = _create(store, user_id, expires_at=expires_at)

        assert store.consume(record.token_id, user_id=user_id, replaced_by_jti="x", now=expires_at) is None


class TestPurge:
    def test_purge_removes_expired_and_old_revoked_rows(self, services, user_id):
        past = utcnow() - timedelta(days=40)
        old_store = RefreshTokenStore(services.database, clock=lambda: past)
        store = services.store

        expired = _create(store, user_id, expires_at=utcnow() - timedelta(seconds=1))
        old_revoked = _create(store, user_id)
        old_store.revoke(old_revoked.token_id)
        recent_revoked = _create(store, user_id)
        store.revoke(recent_revoked.token_id)
        live = _create(store, user_id)

        assert services.cleanup.purge() == 2

        assert store.get(expired.token_id) is None
        assert store.get(old_revoked.token_id) is None
        assert store.get(recent_revoked.token_id) is not None
        assert store.find_live_by_token_id(live.token_id) is not None


class TestUnavailable:
    def test_unreachable_database_is_unavailable(self, tmp_path):
        settings = Settings(
            jwt_secret=TEST_SECRET,
            db_url=f"sqlite:///{tmp_path / 'missing-dir' / 'x.db'}",
            db_timeout_seconds=1,
        )
        store = RefreshTokenStore(Database(settings))

        with pytest.raises(UnavailableError):
            store.find_live_by_token_id("anything")
