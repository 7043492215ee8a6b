"""
Access control collaborators: org membership and org directory lookups.

Both are protocols so the service can run against the database in
production and against in-memory fakes in tests.
"""

from dataclasses import dataclass
from typing import Protocol

from sqlalchemy.orm import Session

from secret_sharing.models.organization import Organization, OrgMembership
from secret_sharing.models.shared_secret import SecretSharingAccessType
from secret_sharing.services.exceptions import UnauthorizedError


@dataclass(frozen=True, slots=True)
class ActorContext:
    """The authenticated caller, passed explicitly into every operation."""

    actor_id: str
    org_id: str | None = None
    auth_method: str = "api"


class AccessGate(Protocol):
    def check_org_membership(self, actor: ActorContext, org_id: str) -> OrgMembership: ...


class OrgDirectory(Protocol):
    def find_org_by_id(self, org_id: str) -> Organization | None: ...


class DatabaseAccessGate:
    def __init__(self, db: Session) -> None:
        self._db = db

    def check_org_membership(self, actor: ActorContext, org_id: str) -> OrgMembership:
        """
        Return the actor's membership in org_id.

        The actor must be acting inside that org and hold a membership row.
        Every failure raises the same UnauthorizedError.
        """
        if actor.org_id != org_id:
            raise UnauthorizedError("User not in org")

        membership = (
            self._db.query(OrgMembership)
            .filter(OrgMembership.org_id == org_id, OrgMembership.user_id == actor.actor_id)
            .first()
        )
        if membership is None:
            raise UnauthorizedError("User not in org")
        return membership


class DatabaseOrgDirectory:
    def __init__(self, db: Session) -> None:
        self._db = db

    def find_org_by_id(self, org_id: str) -> Organization | None:
        return self._db.query(Organization).filter(Organization.id == org_id).first()


def can_redeem(access_type: str, record_org_id: str | None, caller_org_id: str | None) -> bool:
    """Organization-scoped secrets are only redeemable from inside the owning org."""
    if access_type == SecretSharingAccessType.ORGANIZATION.value:
        return record_org_id is not None and caller_org_id == record_org_id
    return True
