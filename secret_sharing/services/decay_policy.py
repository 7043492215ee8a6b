"""
Decay rules for shared secrets.

A secret decays by time (absolute expires_at) and optionally by views (a
remaining-view budget). Evaluation is pure and lazy: callers pass the stored
fields and the current time, and act on the verdict themselves.
"""

import enum
from datetime import UTC, datetime, timedelta

from secret_sharing.config import settings
from secret_sharing.services.exceptions import (
    BadRequestError,
    ExpiryTooFarError,
    InvalidExpiryError,
    PayloadTooLargeError,
)


# Upper bound of the INTEGER column holding the view budget
MAX_EXPIRES_AFTER_VIEWS = 2**31 - 1


class DecayState(str, enum.Enum):
    ACTIVE = "active"
    EXPIRED_BY_TIME = "expired_by_time"
    EXPIRED_BY_VIEWS = "expired_by_views"


def to_naive_utc(value: datetime) -> datetime:
    """Normalize a datetime to the naive UTC form stored in the database."""
    if value.tzinfo is not None:
        return value.astimezone(UTC).replace(tzinfo=None)
    return value


def evaluate_decay(
    expires_at: datetime,
    expires_after_views: int | None,
    now: datetime,
) -> DecayState:
    """Decide whether a secret is still redeemable. Time is checked before views."""
    if expires_at < now:
        return DecayState.EXPIRED_BY_TIME

    if expires_after_views is not None and expires_after_views <= 0:
        return DecayState.EXPIRED_BY_VIEWS

    return DecayState.ACTIVE


def validate_decay_rules(
    expires_at: datetime,
    encrypted_value: str,
    now: datetime,
    expires_after_views: int | None = None,
    max_expiry_days: int | None = None,
    max_encrypted_value_length: int | None = None,
) -> None:
    """
    Validate the decay rules of a new secret.

    Checks run in a fixed order: expiry in the past, expiry too far out,
    ciphertext too long, view limit out of range. Raises a BadRequestError
    subclass on the first failure; nothing is persisted by this function.
    """
    if max_expiry_days is None:
        max_expiry_days = settings.max_expiry_days
    if max_encrypted_value_length is None:
        max_encrypted_value_length = settings.max_encrypted_value_length

    if expires_at <= now:
        raise InvalidExpiryError()

    if expires_at - now > timedelta(days=max_expiry_days):
        raise ExpiryTooFarError(f"Expiration date cannot be more than {max_expiry_days} days")

    if len(encrypted_value) > max_encrypted_value_length:
        raise PayloadTooLargeError()

    if expires_after_views is not None and expires_after_views < 0:
        raise BadRequestError("View limit cannot be negative")

    if expires_after_views is not None and expires_after_views > MAX_EXPIRES_AFTER_VIEWS:
        raise BadRequestError(f"View limit cannot exceed {MAX_EXPIRES_AFTER_VIEWS}")
