from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

from secret_sharing.models.shared_secret import SecretSharingAccessType


def _serialize_utc(value: datetime) -> str:
    """Stored datetimes are naive UTC; emit them with an explicit offset."""
    return value.isoformat() + "Z" if value.tzinfo is None else value.isoformat()


UTCDateTime = Annotated[datetime, PlainSerializer(_serialize_utc, return_type=str)]


class SharedSecretCreate(BaseModel):
    """
    A secret to deposit. Everything but the decay rules is opaque to the server.

    Length bounds on encrypted_value and the expiry window are enforced by the
    service so that they surface as 400s, not schema errors.
    """

    name: str | None = Field(None, max_length=255)
    encrypted_value: str = Field(..., min_length=1, description="Client-side ciphertext")
    iv: str = Field(..., min_length=1, max_length=255)
    tag: str = Field(..., min_length=1, max_length=255)
    hashed_hex: str = Field(..., min_length=1, max_length=128, description="Lookup hash")
    password: str | None = Field(None, min_length=1, max_length=255)
    access_type: SecretSharingAccessType = SecretSharingAccessType.ANYONE
    expires_at: datetime
    expires_after_views: int | None = None


class SharedSecretCreateResponse(BaseModel):
    id: str


class SharedSecretPasswordRequest(BaseModel):
    hashed_hex: str = Field(..., min_length=1, max_length=128)
    password: str = Field(..., min_length=1, max_length=255)


class SharedSecretMetadata(BaseModel):
    """Owner's management view of a secret: never includes the ciphertext."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str | None = None
    access_type: SecretSharingAccessType
    expires_at: UTCDateTime
    expires_after_views: int | None = None
    last_viewed_at: UTCDateTime | None = None
    created_at: UTCDateTime
    is_password_protected: bool


class SharedSecretListResponse(BaseModel):
    secrets: list[SharedSecretMetadata]
    total_count: int


class SharedSecretRedeemResponse(BaseModel):
    status: str
    id: str | None = None
    name: str | None = None
    encrypted_value: str | None = None
    iv: str | None = None
    tag: str | None = None
    access_type: SecretSharingAccessType | None = None
    expires_at: UTCDateTime | None = None
    expires_after_views: int | None = None
    org_name: str | None = None
