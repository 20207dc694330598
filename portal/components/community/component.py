"""
Community component - list, create, brand, update and delete communities.

Superadmins manage every community; an admin manages only the community it
belongs to. Branding is a public read.
"""

from __future__ import annotations

import logging

from portal.components.authz import ClassifyInput, run_classify
from portal.domain.entities import Community
from portal.domain.policy import PolicyEngine
from portal.ports.repo import StoreError

from .models import (
    BrandingOutput,
    CommunityListOutput,
    CommunityOutput,
    CreateCommunityInput,
    DeleteCommunityInput,
    DeleteOutput,
    GetBrandingInput,
    ListCommunitiesInput,
    UpdateCommunityInput,
)
from .ports import CommunityRepoPort, MemberReaderPort, TimePort

logger = logging.getLogger(__name__)


def run_list(
    inp: ListCommunitiesInput,
    community_repo: CommunityRepoPort,
    member_repo: MemberReaderPort,
    policy: PolicyEngine,
) -> CommunityListOutput:
    if inp.requester is None:
        return CommunityListOutput(error="Not authenticated", error_code="unauthenticated")

    privilege = run_classify(ClassifyInput(identity=inp.requester), member_repo, policy).privilege

    try:
        if privilege.kind == "superadmin":
            return CommunityListOutput(communities=community_repo.list_all(), success=True)

        if privilege.kind == "admin" and privilege.community_id is not None:
            community = community_repo.get_by_id(privilege.community_id)
            communities = [community] if community else []
            return CommunityListOutput(communities=communities, success=True)
    except StoreError as e:
        logger.error("Community listing failed: %s", e)
        return CommunityListOutput(
            error="Community lookup failed", error_code="downstream_failure"
        )

    return CommunityListOutput(error="Unauthorized", error_code="unauthorized")


def run_create(
    inp: CreateCommunityInput,
    community_repo: CommunityRepoPort,
    member_repo: MemberReaderPort,
    policy: PolicyEngine,
    time: TimePort,
) -> CommunityOutput:
    if inp.requester is None:
        return CommunityOutput(error="Not authenticated", error_code="unauthenticated")

    name = inp.name.strip()
    if not name:
        return CommunityOutput(error="Name is required", error_code="invalid_input")

    privilege = run_classify(ClassifyInput(identity=inp.requester), member_repo, policy).privilege
    if not policy.can_create_community(privilege):
        return CommunityOutput(error="Unauthorized", error_code="unauthorized")

    now = time.now_utc()
    community = Community(
        name=name,
        logo_url=inp.logo_url,
        favicon_url=inp.favicon_url,
        created_at=now,
        updated_at=now,
    )
    try:
        community_repo.save(community)
    except StoreError as e:
        logger.error("Community insert failed: %s", e)
        return CommunityOutput(error="Failed to create community", error_code="downstream_failure")

    logger.info("Community %s created by %s", community.id, inp.requester)
    return CommunityOutput(community=community, success=True)


def run_get_branding(
    inp: GetBrandingInput,
    community_repo: CommunityRepoPort,
) -> BrandingOutput:
    try:
        community = community_repo.get_by_id(inp.community_id)
    except StoreError as e:
        logger.error("Branding lookup failed for %s: %s", inp.community_id, e)
        return BrandingOutput(error="Community lookup failed", error_code="downstream_failure")

    if community is None:
        return BrandingOutput(error="Community not found", error_code="not_found")

    return BrandingOutput(
        name=community.name,
        logo_url=community.logo_url,
        favicon_url=community.favicon_url,
        success=True,
    )


def run_update(
    inp: UpdateCommunityInput,
    community_repo: CommunityRepoPort,
    member_repo: MemberReaderPort,
    policy: PolicyEngine,
    time: TimePort,
) -> CommunityOutput:
    if inp.requester is None:
        return CommunityOutput(error="Not authenticated", error_code="unauthenticated")

    if inp.name is not None and not inp.name.strip():
        return CommunityOutput(error="Name cannot be empty", error_code="invalid_input")

    privilege = run_classify(ClassifyInput(identity=inp.requester), member_repo, policy).privilege
    if not policy.can_administer(privilege, inp.community_id):
        return CommunityOutput(error="Unauthorized", error_code="unauthorized")

    try:
        community = community_repo.get_by_id(inp.community_id)
        if community is None:
            return CommunityOutput(error="Community not found", error_code="not_found")

        updates: dict[str, object] = {"updated_at": time.now_utc()}
        if inp.name is not None:
            updates["name"] = inp.name.strip()
        if inp.logo_url is not None:
            updates["logo_url"] = inp.logo_url
        if inp.favicon_url is not None:
            updates["favicon_url"] = inp.favicon_url

        updated = community.model_copy(update=updates)
        community_repo.save(updated)
    except StoreError as e:
        logger.error("Community update failed for %s: %s", inp.community_id, e)
        return CommunityOutput(error="Failed to update community", error_code="downstream_failure")

    return CommunityOutput(community=updated, success=True)


def run_delete(
    inp: DeleteCommunityInput,
    community_repo: CommunityRepoPort,
    member_repo: MemberReaderPort,
    policy: PolicyEngine,
) -> DeleteOutput:
    if inp.requester is None:
        return DeleteOutput(error="Not authenticated", error_code="unauthenticated")

    privilege = run_classify(ClassifyInput(identity=inp.requester), member_repo, policy).privilege
    if not policy.can_administer(privilege, inp.community_id):
        return DeleteOutput(error="Unauthorized", error_code="unauthorized")

    try:
        deleted = community_repo.delete(inp.community_id)
    except StoreError as e:
        logger.error("Community delete failed for %s: %s", inp.community_id, e)
        return DeleteOutput(error="Failed to delete community", error_code="downstream_failure")

    if not deleted:
        return DeleteOutput(error="Community not found", error_code="not_found")

    logger.info("Community %s deleted by %s", inp.community_id, inp.requester)
    return DeleteOutput(success=True)


def run(
    inp: (
        ListCommunitiesInput
        | CreateCommunityInput
        | GetBrandingInput
        | UpdateCommunityInput
        | DeleteCommunityInput
    ),
    *,
    community_repo: CommunityRepoPort,
    member_repo: MemberReaderPort | None = None,
    policy: PolicyEngine | None = None,
    time: TimePort | None = None,
) -> CommunityListOutput | CommunityOutput | BrandingOutput | DeleteOutput:
    if isinstance(inp, GetBrandingInput):
        return run_get_branding(inp, community_repo)

    assert member_repo and policy
    if isinstance(inp, ListCommunitiesInput):
        return run_list(inp, community_repo, member_repo, policy)
    elif isinstance(inp, CreateCommunityInput):
        assert time
        return run_create(inp, community_repo, member_repo, policy, time)
    elif isinstance(inp, UpdateCommunityInput):
        assert time
        return run_update(inp, community_repo, member_repo, policy, time)
    elif isinstance(inp, DeleteCommunityInput):
        return run_delete(inp, community_repo, member_repo, policy)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
