from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, status

from portal.api.deps import get_clock, get_community_repo, get_identity, get_member_repo, get_policy
from portal.api.errors import http_error
from portal.api.schemas import (
    MemberCreateRequest,
    MemberResponse,
    MemberRoleRequest,
    MemberStatusRequest,
)
from portal.components.members import (
    CreateMemberInput,
    GetSelfInput,
    ListMembersInput,
    UpdateMemberRoleInput,
    UpdateMemberStatusInput,
    run_create_member,
    run_get_self,
    run_list_members,
    run_update_role,
    run_update_status,
)

router = APIRouter()


@router.get("/me", response_model=MemberResponse)
def get_me(
    identity: UUID | None = Depends(get_identity),
    member_repo: Any = Depends(get_member_repo),
) -> MemberResponse:
    result = run_get_self(GetSelfInput(requester=identity), member_repo=member_repo)

    if not result.success:
        raise http_error(result.error_code, result.error)

    return MemberResponse.model_validate(result.member)


@router.get("", response_model=list[MemberResponse])
def list_members(
    all: bool = False,
    identity: UUID | None = Depends(get_identity),
    member_repo: Any = Depends(get_member_repo),
    policy: Any = Depends(get_policy),
) -> list[MemberResponse]:
    """Members of the caller's community; `all=true` lists everyone for admins."""
    result = run_list_members(
        ListMembersInput(requester=identity, all=all),
        member_repo=member_repo,
        policy=policy,
    )

    if not result.success:
        raise http_error(result.error_code, result.error)

    return [MemberResponse.model_validate(m) for m in result.members]


@router.post("", response_model=MemberResponse, status_code=status.HTTP_201_CREATED)
def create_member(
    req: MemberCreateRequest,
    identity: UUID | None = Depends(get_identity),
    member_repo: Any = Depends(get_member_repo),
    community_repo: Any = Depends(get_community_repo),
    policy: Any = Depends(get_policy),
    clock: Any = Depends(get_clock),
) -> MemberResponse:
    """Add a member to a community (superadmin, or admin of that community)."""
    inp = CreateMemberInput(
        requester=identity,
        email=req.email,
        first_name=req.first_name,
        last_name=req.last_name,
        role=req.role,
        status=req.status,
        community_id=req.community_id,
        member_id=req.id,
    )
    result = run_create_member(
        inp,
        member_repo=member_repo,
        community_repo=community_repo,
        policy=policy,
        time=clock,
    )

    if not result.success:
        raise http_error(result.error_code, result.error)

    return MemberResponse.model_validate(result.member)


@router.patch("/{member_id}/status", response_model=MemberResponse)
def update_member_status(
    member_id: UUID,
    req: MemberStatusRequest,
    identity: UUID | None = Depends(get_identity),
    member_repo: Any = Depends(get_member_repo),
    policy: Any = Depends(get_policy),
    clock: Any = Depends(get_clock),
) -> MemberResponse:
    result = run_update_status(
        UpdateMemberStatusInput(requester=identity, member_id=member_id, status=req.status),
        member_repo=member_repo,
        policy=policy,
        time=clock,
    )

    if not result.success:
        raise http_error(result.error_code, result.error)

    return MemberResponse.model_validate(result.member)


@router.patch("/{member_id}/role", response_model=MemberResponse)
def update_member_role(
    member_id: UUID,
    req: MemberRoleRequest,
    identity: UUID | None = Depends(get_identity),
    member_repo: Any = Depends(get_member_repo),
    policy: Any = Depends(get_policy),
    clock: Any = Depends(get_clock),
) -> MemberResponse:
    result = run_update_role(
        UpdateMemberRoleInput(requester=identity, member_id=member_id, role=req.role),
        member_repo=member_repo,
        policy=policy,
        time=clock,
    )

    if not result.success:
        raise http_error(result.error_code, result.error)

    return MemberResponse.model_validate(result.member)
