from secret_sharing.schemas.shared_secret import (
    SharedSecretCreate,
    SharedSecretCreateResponse,
    SharedSecretListResponse,
    SharedSecretMetadata,
    SharedSecretPasswordRequest,
    SharedSecretRedeemResponse,
)

__all__ = [
    "SharedSecretCreate",
    "SharedSecretCreateResponse",
    "SharedSecretListResponse",
    "SharedSecretMetadata",
    "SharedSecretPasswordRequest",
    "SharedSecretRedeemResponse",
]
