from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request
from sqlalchemy.orm import Session

from secret_sharing.config import settings
from secret_sharing.database import get_db
from secret_sharing.middleware.rate_limit import limiter
from secret_sharing.schemas.shared_secret import (
    SharedSecretCreate,
    SharedSecretCreateResponse,
    SharedSecretListResponse,
    SharedSecretMetadata,
    SharedSecretPasswordRequest,
    SharedSecretRedeemResponse,
)
from secret_sharing.services.access_gate import (
    ActorContext,
    DatabaseAccessGate,
    DatabaseOrgDirectory,
)
from secret_sharing.services.secret_sharing_service import (
    RedemptionResult,
    SecretSharingService,
)
from secret_sharing.services.secret_store import SecretStore

router = APIRouter()


def get_secret_sharing_service(db: Session = Depends(get_db)) -> SecretSharingService:
    """Build the service against the request's database session."""
    return SecretSharingService(
        store=SecretStore(db),
        access_gate=DatabaseAccessGate(db),
        org_directory=DatabaseOrgDirectory(db),
    )


def get_actor_context(
    x_actor_id: str | None = Header(None, alias="X-Actor-Id"),
    x_org_id: str | None = Header(None, alias="X-Org-Id"),
) -> ActorContext:
    """
    Build the caller identity from headers set by the authenticating proxy.

    Login flows live in front of this service; all it needs is who is acting
    and in which org.
    """
    if not x_actor_id:
        raise HTTPException(status_code=401, detail="Missing actor identity")
    return ActorContext(actor_id=x_actor_id, org_id=x_org_id or None)


def get_optional_actor_context(
    x_actor_id: str | None = Header(None, alias="X-Actor-Id"),
    x_org_id: str | None = Header(None, alias="X-Org-Id"),
    db: Session = Depends(get_db),
) -> ActorContext | None:
    """
    Caller identity for the redemption routes, where it is optional.

    Anonymous callers get None. A claimed org is only trusted once the
    membership check passes.
    """
    if not x_actor_id and not x_org_id:
        return None
    if not x_actor_id:
        raise HTTPException(status_code=401, detail="Missing actor identity")

    actor = ActorContext(actor_id=x_actor_id, org_id=x_org_id or None)
    if actor.org_id:
        DatabaseAccessGate(db).check_org_membership(actor, actor.org_id)
    return actor


def to_redeem_response(result: RedemptionResult) -> SharedSecretRedeemResponse:
    if not result.is_available:
        return SharedSecretRedeemResponse(status=result.status.value)

    secret = result.secret
    return SharedSecretRedeemResponse(
        status=result.status.value,
        id=secret.id,
        name=secret.name,
        encrypted_value=secret.encrypted_value,
        iv=secret.iv,
        tag=secret.tag,
        access_type=secret.access_type,
        expires_at=secret.expires_at,
        expires_after_views=secret.expires_after_views,
        org_name=result.org_name,
    )


@router.post("/secret-sharing", response_model=SharedSecretCreateResponse, status_code=201)
@limiter.limit(settings.rate_limit_creates)
def create_shared_secret(
    request: Request,
    secret_data: SharedSecretCreate,
    actor: ActorContext = Depends(get_actor_context),
    service: SecretSharingService = Depends(get_secret_sharing_service),
):
    """Create a secret owned by the caller's organization."""
    secret_id = service.create_shared_secret(actor, secret_data)
    return SharedSecretCreateResponse(id=secret_id)


@router.post("/secret-sharing/public", response_model=SharedSecretCreateResponse, status_code=201)
@limiter.limit(settings.rate_limit_creates)
def create_public_shared_secret(
    request: Request,
    secret_data: SharedSecretCreate,
    service: SecretSharingService = Depends(get_secret_sharing_service),
):
    """Create an anonymous secret redeemable by anyone holding the link."""
    secret_id = service.create_public_shared_secret(secret_data)
    return SharedSecretCreateResponse(id=secret_id)


@router.get("/secret-sharing", response_model=SharedSecretListResponse)
@limiter.limit(settings.rate_limit_manage)
def list_shared_secrets(
    request: Request,
    offset: int = Query(0, ge=0),
    limit: int = Query(settings.default_page_limit, ge=1, le=settings.max_page_limit),
    actor: ActorContext = Depends(get_actor_context),
    service: SecretSharingService = Depends(get_secret_sharing_service),
):
    """List the caller's secrets (metadata only), newest first."""
    page = service.get_shared_secrets(actor, offset=offset, limit=limit)
    return SharedSecretListResponse(
        secrets=[SharedSecretMetadata.model_validate(secret) for secret in page.secrets],
        total_count=page.total_count,
    )


@router.get("/secret-sharing/public/{secret_id}", response_model=SharedSecretRedeemResponse)
@limiter.limit(settings.rate_limit_retrieves)
def redeem_shared_secret(
    request: Request,
    secret_id: str,
    hashed_hex: str = Query(..., min_length=1, max_length=128),
    actor: ActorContext | None = Depends(get_optional_actor_context),
    service: SecretSharingService = Depends(get_secret_sharing_service),
):
    """
    Redeem a secret without a password.

    Password-gated secrets answer with status "password_required" and are
    not counted as viewed.
    """
    result = service.get_active_shared_secret_by_id(
        secret_id, hashed_hex, actor.org_id if actor else None
    )
    return to_redeem_response(result)


@router.post("/secret-sharing/public/{secret_id}", response_model=SharedSecretRedeemResponse)
@limiter.limit(settings.rate_limit_retrieves)
def redeem_shared_secret_with_password(
    request: Request,
    secret_id: str,
    password_data: SharedSecretPasswordRequest,
    actor: ActorContext | None = Depends(get_optional_actor_context),
    service: SecretSharingService = Depends(get_secret_sharing_service),
):
    """Redeem a password-gated secret. A wrong password answers "password_mismatch"."""
    result = service.validate_secret_password(
        secret_id,
        password_data.hashed_hex,
        actor.org_id if actor else None,
        password_data.password,
    )
    return to_redeem_response(result)


@router.delete("/secret-sharing/{secret_id}", response_model=SharedSecretMetadata | None)
@limiter.limit(settings.rate_limit_manage)
def delete_shared_secret(
    request: Request,
    secret_id: str,
    actor: ActorContext = Depends(get_actor_context),
    service: SecretSharingService = Depends(get_secret_sharing_service),
):
    """Revoke a secret. Deleting an unknown id succeeds with a null body."""
    deleted = service.delete_shared_secret_by_id(actor, secret_id)
    if deleted is None:
        return None
    return SharedSecretMetadata.model_validate(deleted)
