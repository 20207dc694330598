from dataclasses import dataclass
from typing import Literal
from uuid import UUID

from portal.domain.entities import Member
from portal.rules.models import Rules

PrivilegeKind = Literal["superadmin", "admin", "unprivileged"]


@dataclass(frozen=True)
class Privilege:
    """Classification of an identity: superadmin, admin-of(community_id) or unprivileged."""

    kind: PrivilegeKind
    community_id: UUID | None = None

    @property
    def is_elevated(self) -> bool:
        return self.kind != "unprivileged"

    def is_admin_of(self, community_id: UUID) -> bool:
        return self.kind == "admin" and self.community_id == community_id


UNPRIVILEGED = Privilege(kind="unprivileged")


class PolicyEngine:
    def __init__(self, rules: Rules):
        self.rules = rules

    def classify(self, member: Member | None) -> Privilege:
        """
        Map a member record to its privilege.

        A missing record, an inactive member or an admin without a community
        is unprivileged.
        """
        if member is None or member.status != "active":
            return UNPRIVILEGED

        rbac = self.rules.rbac
        if member.role in rbac.superadmin_roles:
            return Privilege(kind="superadmin")

        if member.role in rbac.community_admin_roles:
            if member.community_id is None:
                return UNPRIVILEGED
            return Privilege(kind="admin", community_id=member.community_id)

        return UNPRIVILEGED

    def can_administer(self, privilege: Privilege, community_id: UUID) -> bool:
        return privilege.kind == "superadmin" or privilege.is_admin_of(community_id)

    def can_issue_invites(self, privilege: Privilege, community_id: UUID) -> bool:
        return self.can_administer(privilege, community_id)

    def can_create_community(self, privilege: Privilege) -> bool:
        return privilege.is_elevated

    def can_list_all_members(self, privilege: Privilege) -> bool:
        return privilege.is_elevated

    def can_assign_role(self, privilege: Privilege, role: str) -> bool:
        """Only a superadmin may hand out a superadmin role."""
        return role not in self.rules.rbac.superadmin_roles or privilege.kind == "superadmin"

    def can_manage_member(self, privilege: Privilege, target: Member) -> bool:
        """
        Whether `privilege` may change the target's role or status.

        Admins manage members of their own community, but never a superadmin.
        A member without a community is managed by superadmins only.
        """
        if privilege.kind == "superadmin":
            return True
        if target.role in self.rules.rbac.superadmin_roles or target.community_id is None:
            return False
        return privilege.is_admin_of(target.community_id)
