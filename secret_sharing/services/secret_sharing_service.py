"""
Secret sharing: creation, owner management and redemption of shared secrets.

Redemption is where the decay rules bite. Every read re-evaluates the stored
record, soft-deletes it when it has run out of time or views, and only
counts a view once the conditional decrement in the store has succeeded.
"""

import enum
from dataclasses import dataclass
from datetime import UTC, datetime

import structlog

from secret_sharing.config import settings
from secret_sharing.models.shared_secret import SecretSharingAccessType, SharedSecret
from secret_sharing.schemas.shared_secret import SharedSecretCreate
from secret_sharing.services.access_gate import (
    AccessGate,
    ActorContext,
    OrgDirectory,
    can_redeem,
)
from secret_sharing.services.crypto_utils import hash_password, verify_password
from secret_sharing.services.decay_policy import (
    DecayState,
    evaluate_decay,
    to_naive_utc,
    validate_decay_rules,
)
from secret_sharing.services.exceptions import (
    BadRequestError,
    ForbiddenError,
    InternalServerError,
    NotFoundError,
    UnauthorizedError,
)
from secret_sharing.services.secret_store import SecretStore

logger = structlog.get_logger()

EXPIRED_MESSAGES = {
    DecayState.EXPIRED_BY_TIME: "Access denied: Secret has expired by lifetime",
    DecayState.EXPIRED_BY_VIEWS: "Access denied: Secret has expired by view count",
}


@dataclass(frozen=True, slots=True)
class RedeemedSecret:
    """Fields of a redeemed secret, captured before its view was spent."""

    id: str
    name: str | None
    encrypted_value: str
    iv: str
    tag: str
    access_type: str
    org_id: str | None
    expires_at: datetime
    expires_after_views: int | None
    last_viewed_at: datetime


class RedemptionStatus(str, enum.Enum):
    AVAILABLE = "available"
    PASSWORD_REQUIRED = "password_required"
    PASSWORD_MISMATCH = "password_mismatch"


@dataclass(frozen=True, slots=True)
class RedemptionResult:
    status: RedemptionStatus
    secret: RedeemedSecret | None = None
    org_name: str | None = None

    @property
    def is_available(self) -> bool:
        return self.status == RedemptionStatus.AVAILABLE


@dataclass(frozen=True, slots=True)
class SharedSecretPage:
    secrets: list[SharedSecret]
    total_count: int


class SecretSharingService:
    def __init__(
        self,
        store: SecretStore,
        access_gate: AccessGate,
        org_directory: OrgDirectory,
    ) -> None:
        self._store = store
        self._access_gate = access_gate
        self._org_directory = org_directory

    @staticmethod
    def _now() -> datetime:
        return datetime.now(UTC).replace(tzinfo=None)

    def _require_org(self, actor: ActorContext) -> str:
        if not actor.org_id:
            raise BadRequestError("Missing organization context")
        self._access_gate.check_org_membership(actor, actor.org_id)
        return actor.org_id

    def _persist(self, payload: SharedSecretCreate, **owner_fields) -> SharedSecret:
        now = self._now()
        expires_at = to_naive_utc(payload.expires_at)
        validate_decay_rules(
            expires_at=expires_at,
            encrypted_value=payload.encrypted_value,
            now=now,
            expires_after_views=payload.expires_after_views,
        )

        hashed_password = hash_password(payload.password) if payload.password else None

        return self._store.create(
            encrypted_value=payload.encrypted_value,
            iv=payload.iv,
            tag=payload.tag,
            hashed_hex=payload.hashed_hex,
            password=hashed_password,
            expires_at=expires_at,
            expires_after_views=payload.expires_after_views,
            **owner_fields,
        )

    def create_shared_secret(self, actor: ActorContext, payload: SharedSecretCreate) -> str:
        """Create an org-owned secret. Returns only the new id."""
        org_id = self._require_org(actor)

        secret = self._persist(
            payload,
            name=payload.name,
            access_type=payload.access_type.value,
            user_id=actor.actor_id,
            org_id=org_id,
        )

        logger.info(
            "shared_secret_created",
            secret_id=secret.id,
            org_id=org_id,
            access_type=secret.access_type,
            password_protected=secret.is_password_protected,
            expires_after_views=secret.expires_after_views,
        )
        return secret.id

    def create_public_shared_secret(self, payload: SharedSecretCreate) -> str:
        """Create an anonymous secret: no access check, no owner, redeemable by anyone."""
        secret = self._persist(payload, access_type=SecretSharingAccessType.ANYONE.value)

        logger.info(
            "public_shared_secret_created",
            secret_id=secret.id,
            password_protected=secret.is_password_protected,
            expires_after_views=secret.expires_after_views,
        )
        return secret.id

    def get_shared_secrets(
        self, actor: ActorContext, offset: int = 0, limit: int | None = None
    ) -> SharedSecretPage:
        """List the actor's own secrets in their org, newest first."""
        org_id = self._require_org(actor)
        if limit is None:
            limit = settings.default_page_limit

        secrets = self._store.find(actor.actor_id, org_id, offset=offset, limit=limit)
        total_count = self._store.count(actor.actor_id, org_id)

        return SharedSecretPage(secrets=secrets, total_count=total_count)

    def delete_shared_secret_by_id(
        self, actor: ActorContext, secret_id: str
    ) -> SharedSecret | None:
        """
        Hard delete a secret owned by the actor's org.

        Deleting an id that does not exist (or belongs to another org) is a
        no-op and returns None.
        """
        org_id = self._require_org(actor)

        deleted = self._store.delete_by_id(secret_id, org_id=org_id)
        logger.info("shared_secret_deleted", secret_id=secret_id, found=deleted is not None)
        return deleted

    def get_active_shared_secret_by_id(
        self,
        secret_id: str,
        hashed_hex: str,
        caller_org_id: str | None = None,
    ) -> RedemptionResult:
        """Redeem a secret that has no password gate."""
        secret = self._load_redeemable(secret_id, hashed_hex, caller_org_id)

        if secret.is_password_protected:
            return RedemptionResult(status=RedemptionStatus.PASSWORD_REQUIRED)

        return self._redeem(secret, caller_org_id)

    def validate_secret_password(
        self,
        secret_id: str,
        hashed_hex: str,
        caller_org_id: str | None,
        password: str,
    ) -> RedemptionResult:
        """Redeem a password-gated secret. A wrong password spends no view."""
        secret = self._load_redeemable(secret_id, hashed_hex, caller_org_id)

        if not secret.is_password_protected:
            logger.error("shared_secret_password_missing", secret_id=secret_id)
            raise InternalServerError("Something went wrong")

        if not verify_password(password, secret.password):
            logger.info("shared_secret_password_mismatch", secret_id=secret_id)
            return RedemptionResult(status=RedemptionStatus.PASSWORD_MISMATCH)

        return self._redeem(secret, caller_org_id)

    def expire_secret(self, secret_id: str, state: DecayState) -> None:
        """Soft-delete an expired secret and raise. Safe to call concurrently."""
        first = self._store.soft_delete_by_id(secret_id)
        logger.info(
            "shared_secret_expired",
            secret_id=secret_id,
            reason=state.value,
            already_deleted=not first,
        )
        raise ForbiddenError(EXPIRED_MESSAGES[state])

    def _load_redeemable(
        self, secret_id: str, hashed_hex: str, caller_org_id: str | None
    ) -> SharedSecret:
        secret = self._store.find_one(secret_id, hashed_hex)
        if secret is None:
            raise NotFoundError("Shared secret not found")

        if not can_redeem(secret.access_type, secret.org_id, caller_org_id):
            raise UnauthorizedError()

        state = evaluate_decay(secret.expires_at, secret.expires_after_views, self._now())
        if state != DecayState.ACTIVE:
            self.expire_secret(secret.id, state)

        return secret

    def _redeem(self, secret: SharedSecret, caller_org_id: str | None) -> RedemptionResult:
        secret_id = secret.id
        now = self._now()

        # The commit in consume_view expires the instance; read everything first
        views = secret.expires_after_views
        redeemed = RedeemedSecret(
            id=secret_id,
            name=secret.name,
            encrypted_value=secret.encrypted_value,
            iv=secret.iv,
            tag=secret.tag,
            access_type=secret.access_type,
            org_id=secret.org_id,
            expires_at=secret.expires_at,
            expires_after_views=views - 1 if views is not None else None,
            last_viewed_at=now,
        )

        if not self._store.consume_view(secret_id, now):
            # Lost a race: re-read what the winner left behind and expire it
            current = self._store.get_by_id(secret_id)
            state = DecayState.EXPIRED_BY_VIEWS
            if current is not None and current.expires_at < now:
                state = DecayState.EXPIRED_BY_TIME
            logger.info("shared_secret_view_race_lost", secret_id=secret_id)
            self.expire_secret(secret_id, state)

        logger.info("shared_secret_viewed", secret_id=secret_id)

        org_name = None
        if (
            redeemed.access_type == SecretSharingAccessType.ORGANIZATION.value
            and redeemed.org_id is not None
            and caller_org_id == redeemed.org_id
        ):
            org = self._org_directory.find_org_by_id(redeemed.org_id)
            org_name = org.name if org else None

        return RedemptionResult(
            status=RedemptionStatus.AVAILABLE,
            secret=redeemed,
            org_name=org_name,
        )
