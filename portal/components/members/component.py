"""
Members component - member lookups plus admin changes to member records.
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID, uuid4

from portal.components.authz import ClassifyInput, run_classify
from portal.domain.entities import MEMBER_ROLES, MEMBER_STATUSES, Member
from portal.domain.policy import PolicyEngine
from portal.ports.repo import StoreConflictError, StoreError

from .models import (
    CreateMemberInput,
    GetSelfInput,
    ListMembersInput,
    MemberListOutput,
    MemberOutput,
    UpdateMemberRoleInput,
    UpdateMemberStatusInput,
)
from .ports import CommunityReaderPort, MemberAdminPort, MemberDirectoryPort, TimePort

logger = logging.getLogger(__name__)


def run_get_self(inp: GetSelfInput, member_repo: MemberDirectoryPort) -> MemberOutput:
    if inp.requester is None:
        return MemberOutput(error="Not authenticated", error_code="unauthenticated")

    try:
        member = member_repo.get_by_id(inp.requester)
    except StoreError as e:
        logger.error("Member lookup failed for %s: %s", inp.requester, e)
        return MemberOutput(error="Member lookup failed", error_code="downstream_failure")

    if member is None:
        return MemberOutput(error="Member not found", error_code="not_found")
    return MemberOutput(member=member, success=True)


def run_list_members(
    inp: ListMembersInput,
    member_repo: MemberDirectoryPort,
    policy: PolicyEngine,
) -> MemberListOutput:
    """
    List the member directory.

    Elevated callers asking for `all` get every member. Everyone else gets
    the members of their own community; a caller without one is refused.
    """
    if inp.requester is None:
        return MemberListOutput(error="Not authenticated", error_code="unauthenticated")

    authz = run_classify(ClassifyInput(identity=inp.requester), member_repo, policy)

    try:
        if inp.all and policy.can_list_all_members(authz.privilege):
            return MemberListOutput(members=member_repo.list_all(), success=True)

        if authz.member is None or authz.member.community_id is None:
            return MemberListOutput(
                error="Community not found for user", error_code="unauthorized"
            )

        members = member_repo.list_by_community(authz.member.community_id)
    except StoreError as e:
        logger.error("Member listing failed for %s: %s", inp.requester, e)
        return MemberListOutput(error="Member lookup failed", error_code="downstream_failure")

    return MemberListOutput(members=members, success=True)


def run_create_member(
    inp: CreateMemberInput,
    member_repo: MemberAdminPort,
    community_repo: CommunityReaderPort,
    policy: PolicyEngine,
    time: TimePort,
) -> MemberOutput:
    """
    Add a member record to a community.

    Superadmins add to any community, admins only to their own. Creating the
    identity-service account is not part of this; the record is linked by id.
    """
    if inp.requester is None:
        return MemberOutput(error="Not authenticated", error_code="unauthenticated")

    required = (inp.email, inp.first_name, inp.last_name, inp.role, inp.status)
    if not all(v and v.strip() for v in required) or inp.community_id is None:
        return MemberOutput(error="Missing required fields", error_code="invalid_input")

    invalid = _invalid_value(role=inp.role, status=inp.status)
    if invalid:
        return MemberOutput(error=invalid, error_code="invalid_input")

    authz = run_classify(ClassifyInput(identity=inp.requester), member_repo, policy)
    if not policy.can_administer(authz.privilege, inp.community_id):
        if authz.privilege.kind == "admin":
            return MemberOutput(
                error="Admins can only add members to their own community",
                error_code="unauthorized",
            )
        return MemberOutput(error="Unauthorized", error_code="unauthorized")
    if not policy.can_assign_role(authz.privilege, inp.role):
        return MemberOutput(error="Role requires a superadmin", error_code="unauthorized")

    now = time.now_utc()
    member = Member(
        id=inp.member_id or uuid4(),
        email=inp.email.strip(),
        first_name=inp.first_name.strip(),
        last_name=inp.last_name.strip(),
        role=inp.role,
        status=inp.status,
        community_id=inp.community_id,
        created_at=now,
        updated_at=now,
    )

    try:
        if community_repo.get_by_id(inp.community_id) is None:
            return MemberOutput(error="Community not found", error_code="not_found")
        member_repo.insert(member)
    except StoreConflictError:
        return MemberOutput(
            error="A member with this id or email already exists", error_code="conflict"
        )
    except StoreError as e:
        logger.error("Member insert failed for community %s: %s", inp.community_id, e)
        return MemberOutput(error="Failed to create member", error_code="downstream_failure")

    logger.info(
        "Member %s added to community %s by %s", member.id, member.community_id, inp.requester
    )
    return MemberOutput(member=member, success=True)


def run_update_status(
    inp: UpdateMemberStatusInput,
    member_repo: MemberAdminPort,
    policy: PolicyEngine,
    time: TimePort,
) -> MemberOutput:
    invalid = _invalid_value(status=inp.status)
    return _update_member(
        inp.requester, inp.member_id, {"status": inp.status}, invalid, member_repo, policy, time
    )


def run_update_role(
    inp: UpdateMemberRoleInput,
    member_repo: MemberAdminPort,
    policy: PolicyEngine,
    time: TimePort,
) -> MemberOutput:
    invalid = _invalid_value(role=inp.role)
    return _update_member(
        inp.requester, inp.member_id, {"role": inp.role}, invalid, member_repo, policy, time
    )


def _invalid_value(role: str | None = None, status: str | None = None) -> str | None:
    if role is not None and role not in MEMBER_ROLES:
        return f"Unknown role: {role}"
    if status is not None and status not in MEMBER_STATUSES:
        return f"Unknown status: {status}"
    return None


def _update_member(
    requester: UUID | None,
    member_id: UUID,
    changes: dict[str, Any],
    invalid: str | None,
    member_repo: MemberAdminPort,
    policy: PolicyEngine,
    time: TimePort,
) -> MemberOutput:
    if requester is None:
        return MemberOutput(error="Not authenticated", error_code="unauthenticated")

    if invalid:
        return MemberOutput(error=invalid, error_code="invalid_input")

    # Unprivileged callers get unauthorized whatever the member id
    authz = run_classify(ClassifyInput(identity=requester), member_repo, policy)
    if not authz.privilege.is_elevated:
        return MemberOutput(error="Unauthorized", error_code="unauthorized")

    try:
        target = member_repo.get_by_id(member_id)
        if target is None:
            return MemberOutput(error="Member not found", error_code="not_found")

        if not policy.can_manage_member(authz.privilege, target):
            return MemberOutput(error="Unauthorized", error_code="unauthorized")
        if "role" in changes and not policy.can_assign_role(authz.privilege, changes["role"]):
            return MemberOutput(error="Role requires a superadmin", error_code="unauthorized")

        updated = target.model_copy(update={**changes, "updated_at": time.now_utc()})
        member_repo.save(updated)
    except StoreError as e:
        logger.error("Member %s update failed: %s", member_id, e)
        return MemberOutput(error="Failed to update member", error_code="downstream_failure")

    logger.info("Member %s updated by %s: %s", member_id, requester, changes)
    return MemberOutput(member=updated, success=True)


def run(
    inp: (
        GetSelfInput
        | ListMembersInput
        | CreateMemberInput
        | UpdateMemberStatusInput
        | UpdateMemberRoleInput
    ),
    *,
    member_repo: MemberAdminPort,
    policy: PolicyEngine | None = None,  # all but get_self
    community_repo: CommunityReaderPort | None = None,  # create
    time: TimePort | None = None,  # create, updates
) -> MemberOutput | MemberListOutput:
    if isinstance(inp, GetSelfInput):
        return run_get_self(inp, member_repo)
    elif isinstance(inp, ListMembersInput):
        assert policy
        return run_list_members(inp, member_repo, policy)
    elif isinstance(inp, CreateMemberInput):
        assert policy and community_repo and time
        return run_create_member(inp, member_repo, community_repo, policy, time)
    elif isinstance(inp, UpdateMemberStatusInput):
        assert policy and time
        return run_update_status(inp, member_repo, policy, time)
    elif isinstance(inp, UpdateMemberRoleInput):
        assert policy and time
        return run_update_role(inp, member_repo, policy, time)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
