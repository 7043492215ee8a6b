"""
Storage adapter for shared secrets.

Every mutation that the decay rules depend on is a single conditional UPDATE,
so the database row (not the in-memory object) decides who wins a race.
Nothing here caches secret state between calls.
"""

from datetime import UTC, datetime

from sqlalchemy import or_
from sqlalchemy.orm import Session

from secret_sharing.models.shared_secret import SharedSecret


class SecretStore:
    def __init__(self, db: Session) -> None:
        self._db = db

    @staticmethod
    def _now() -> datetime:
        return datetime.now(UTC).replace(tzinfo=None)

    def create(self, **fields) -> SharedSecret:
        secret = SharedSecret(**fields)

        self._db.add(secret)
        self._db.commit()
        self._db.refresh(secret)

        return secret

    def find_one(self, secret_id: str, hashed_hex: str) -> SharedSecret | None:
        """Find a live secret; both the id and the lookup hash must match."""
        return (
            self._db.query(SharedSecret)
            .filter(
                SharedSecret.id == secret_id,
                SharedSecret.hashed_hex == hashed_hex,
                SharedSecret.deleted_at == None,  # noqa: E711
            )
            .first()
        )

    def get_by_id(self, secret_id: str) -> SharedSecret | None:
        """Fetch a record regardless of its soft-delete marker."""
        return self._db.query(SharedSecret).filter(SharedSecret.id == secret_id).first()

    def find(
        self, user_id: str, org_id: str, offset: int = 0, limit: int = 25
    ) -> list[SharedSecret]:
        """List a user's live secrets in an org, newest first."""
        return (
            self._db.query(SharedSecret)
            .filter(
                SharedSecret.user_id == user_id,
                SharedSecret.org_id == org_id,
                SharedSecret.deleted_at == None,  # noqa: E711
            )
            .order_by(SharedSecret.created_at.desc(), SharedSecret.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def count(self, user_id: str, org_id: str) -> int:
        return (
            self._db.query(SharedSecret)
            .filter(
                SharedSecret.user_id == user_id,
                SharedSecret.org_id == org_id,
                SharedSecret.deleted_at == None,  # noqa: E711
            )
            .count()
        )

    def update_by_id(self, secret_id: str, **patch) -> int:
        result = (
            self._db.query(SharedSecret)
            .filter(SharedSecret.id == secret_id)
            .update(patch, synchronize_session=False)
        )
        self._db.commit()
        return result

    def consume_view(self, secret_id: str, now: datetime | None = None) -> bool:
        """
        Atomically spend one view and stamp last_viewed_at.

        The row is only touched while it is live, unexpired, and either has
        an unlimited budget (NULL stays NULL) or a budget above zero. Returns
        False when another caller exhausted, expired or deleted it first.
        """
        now = now or self._now()
        result = (
            self._db.query(SharedSecret)
            .filter(
                SharedSecret.id == secret_id,
                SharedSecret.deleted_at == None,  # noqa: E711
                SharedSecret.expires_at >= now,
                or_(
                    SharedSecret.expires_after_views == None,  # noqa: E711
                    SharedSecret.expires_after_views > 0,
                ),
            )
            .update(
                {
                    SharedSecret.expires_after_views: SharedSecret.expires_after_views - 1,
                    SharedSecret.last_viewed_at: now,
                },
                synchronize_session=False,
            )
        )
        self._db.commit()
        return result == 1

    def soft_delete_by_id(self, secret_id: str) -> bool:
        """
        Mark a secret as deleted.

        Idempotent: only the first caller flips the marker, later calls are
        no-ops that return False.
        """
        result = (
            self._db.query(SharedSecret)
            .filter(
                SharedSecret.id == secret_id,
                SharedSecret.deleted_at == None,  # noqa: E711
            )
            .update({SharedSecret.deleted_at: self._now()}, synchronize_session=False)
        )
        self._db.commit()
        return result == 1

    def delete_by_id(self, secret_id: str, org_id: str | None = None) -> SharedSecret | None:
        """Hard delete a secret. Returns the removed record, or None if absent."""
        query = self._db.query(SharedSecret).filter(SharedSecret.id == secret_id)
        if org_id is not None:
            query = query.filter(SharedSecret.org_id == org_id)

        secret = query.first()
        if secret is None:
            return None

        self._db.delete(secret)
        self._db.commit()
        return secret
