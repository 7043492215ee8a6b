"""Tests for the shared secret storage adapter."""

from datetime import timedelta

import pytest

from secret_sharing.services.secret_store import SecretStore
from tests.test_utils import generate_secret_payload, utcnow


@pytest.fixture
def store(db_session):
    return SecretStore(db_session)


def make_secret(store, **overrides):
    fields = generate_secret_payload()
    fields.update(
        access_type="anyone",
        expires_at=utcnow() + timedelta(days=1),
        expires_after_views=None,
    )
    fields.update(overrides)
    return store.create(**fields)


class TestLookup:
    def test_find_one_requires_matching_hash(self, store):
        secret = make_secret(store)

        assert store.find_one(secret.id, secret.hashed_hex).id == secret.id
        assert store.find_one(secret.id, "0" * 64) is None
        assert store.find_one("missing-id", secret.hashed_hex) is None

    def test_find_one_skips_soft_deleted(self, store):
        secret = make_secret(store)
        secret_id, hashed_hex = secret.id, secret.hashed_hex

        store.soft_delete_by_id(secret_id)

        assert store.find_one(secret_id, hashed_hex) is None
        assert store.get_by_id(secret_id) is not None

    def test_find_lists_newest_first_and_counts(self, store):
        now = utcnow()
        old = make_secret(store, user_id="u", org_id="o", created_at=now - timedelta(hours=2))
        new = make_secret(store, user_id="u", org_id="o", created_at=now)
        make_secret(store, user_id="someone-else", org_id="o")
        gone = make_secret(store, user_id="u", org_id="o")
        store.soft_delete_by_id(gone.id)

        secrets = store.find("u", "o")

        assert [s.id for s in secrets] == [new.id, old.id]
        assert store.count("u", "o") == 2
        assert [s.id for s in store.find("u", "o", offset=1, limit=1)] == [old.id]


class TestConsumeView:
    def test_decrements_and_stamps_last_viewed(self, store, db_session):
        secret = make_secret(store, expires_after_views=2)
        secret_id = secret.id

        assert store.consume_view(secret_id) is True

        db_session.expire_all()
        reloaded = store.get_by_id(secret_id)
        assert reloaded.expires_after_views == 1
        assert reloaded.last_viewed_at is not None

    def test_refuses_to_go_below_zero(self, store, db_session):
        secret = make_secret(store, expires_after_views=1)
        secret_id = secret.id

        assert store.consume_view(secret_id) is True
        assert store.consume_view(secret_id) is False

        db_session.expire_all()
        assert store.get_by_id(secret_id).expires_after_views == 0

    def test_unlimited_budget_stays_unlimited(self, store, db_session):
        secret = make_secret(store, expires_after_views=None)
        secret_id = secret.id

        assert store.consume_view(secret_id) is True
        assert store.consume_view(secret_id) is True

        db_session.expire_all()
        reloaded = store.get_by_id(secret_id)
        assert reloaded.expires_after_views is None
        assert reloaded.last_viewed_at is not None

    def test_refuses_expired_or_deleted_rows(self, store):
        expired = make_secret(store, expires_at=utcnow() - timedelta(minutes=1))
        deleted = make_secret(store)
        deleted_id = deleted.id
        store.soft_delete_by_id(deleted_id)

        assert store.consume_view(expired.id) is False
        assert store.consume_view(deleted_id) is False


class TestDeletion:
    def test_soft_delete_is_idempotent(self, store, db_session):
        secret = make_secret(store)
        secret_id = secret.id

        assert store.soft_delete_by_id(secret_id) is True
        db_session.expire_all()
        first_deleted_at = store.get_by_id(secret_id).deleted_at

        assert store.soft_delete_by_id(secret_id) is False
        db_session.expire_all()
        assert store.get_by_id(secret_id).deleted_at == first_deleted_at

    def test_soft_delete_of_missing_row_is_noop(self, store):
        assert store.soft_delete_by_id("does-not-exist") is False

    def test_hard_delete_removes_row(self, store):
        secret = make_secret(store, org_id="o")
        secret_id = secret.id

        deleted = store.delete_by_id(secret_id, org_id="o")

        assert deleted.id == secret_id
        assert store.get_by_id(secret_id) is None

    def test_hard_delete_scoped_to_org(self, store):
        secret = make_secret(store, org_id="o")

        assert store.delete_by_id(secret.id, org_id="other") is None
        assert store.get_by_id(secret.id) is not None

    def test_hard_delete_missing_returns_none(self, store):
        assert store.delete_by_id("does-not-exist") is None

    def test_update_by_id(self, store, db_session):
        secret = make_secret(store)
        secret_id = secret.id

        assert store.update_by_id(secret_id, name="renamed") == 1

        db_session.expire_all()
        assert store.get_by_id(secret_id).name == "renamed"
