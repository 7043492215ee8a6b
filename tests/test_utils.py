"""Shared test utilities."""

import base64
import secrets
from datetime import UTC, datetime

from secret_sharing.models.organization import Organization, OrgMembership
from secret_sharing.services.access_gate import ActorContext
from secret_sharing.services.exceptions import UnauthorizedError

ORG_ID = "org-1"
OTHER_ORG_ID = "org-2"
USER_ID = "user-1"


def utcnow():
    """Get current UTC time as naive datetime."""
    return datetime.now(UTC).replace(tzinfo=None)


def generate_secret_payload(size: int = 100) -> dict:
    """Generate opaque fields the way a browser client would send them."""
    return {
        "encrypted_value": base64.b64encode(secrets.token_bytes(size)).decode(),
        "iv": base64.b64encode(secrets.token_bytes(12)).decode(),
        "tag": base64.b64encode(secrets.token_bytes(16)).decode(),
        "hashed_hex": secrets.token_hex(32),
    }


class FakeAccessGate:
    """In-memory membership table: {(org_id, user_id), ...}."""

    def __init__(self, memberships: set[tuple[str, str]] | None = None):
        self.memberships = memberships or set()
        self.calls: list[tuple[str, str]] = []

    def check_org_membership(self, actor: ActorContext, org_id: str):
        self.calls.append((actor.actor_id, org_id))
        if actor.org_id != org_id or (org_id, actor.actor_id) not in self.memberships:
            raise UnauthorizedError("User not in org")
        return OrgMembership(org_id=org_id, user_id=actor.actor_id, role="member")


class FakeOrgDirectory:
    def __init__(self, names: dict[str, str] | None = None):
        self.names = names or {}

    def find_org_by_id(self, org_id: str):
        if org_id not in self.names:
            return None
        return Organization(id=org_id, name=self.names[org_id])


def add_member(db_session, org_name: str = "Acme", user_id: str = "user-1") -> Organization:
    """Create an organization with one member and return it."""
    org = Organization(name=org_name)
    db_session.add(org)
    db_session.flush()
    db_session.add(OrgMembership(org_id=org.id, user_id=user_id))
    db_session.commit()
    db_session.refresh(org)
    return org
