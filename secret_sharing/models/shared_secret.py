import enum
import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from secret_sharing.database import Base


def utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class SecretSharingAccessType(str, enum.Enum):
    ANYONE = "anyone"
    ORGANIZATION = "organization"


class SharedSecret(Base):
    """
    An encrypted blob plus the rules under which it decays.

    The server never decrypts anything here: encrypted_value, iv and tag are
    stored exactly as the client sent them. hashed_hex is required alongside
    the id to look the record up.
    """

    __tablename__ = "shared_secrets"
    __table_args__ = (
        Index("ix_shared_secrets_id_hashed_hex", "id", "hashed_hex"),
        Index("ix_shared_secrets_org_user_created", "org_id", "user_id", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Opaque client-side encrypted payload
    encrypted_value: Mapped[str] = mapped_column(Text, nullable=False)
    iv: Mapped[str] = mapped_column(String(255), nullable=False)
    tag: Mapped[str] = mapped_column(String(255), nullable=False)
    hashed_hex: Mapped[str] = mapped_column(String(128), nullable=False)

    # Argon2 hash, never the plaintext password
    password: Mapped[str | None] = mapped_column(String(255), nullable=True)

    access_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=SecretSharingAccessType.ANYONE.value
    )

    # Ownership (both null for public secrets)
    org_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    user_id: Mapped[str | None] = mapped_column(String(36), nullable=True)

    # Decay rules
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    expires_after_views: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Timestamps
    last_viewed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True, default=None)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True, default=None)

    @property
    def is_password_protected(self) -> bool:
        return self.password is not None
