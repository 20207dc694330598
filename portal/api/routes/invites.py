from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from portal.api.deps import (
    get_clock,
    get_community_repo,
    get_identity,
    get_invite_repo,
    get_member_repo,
    get_policy,
    get_rules,
)
from portal.api.errors import http_error
from portal.api.schemas import (
    InviteAcceptRequest,
    InviteAcceptResponse,
    InviteCreateRequest,
    InviteLookupResponse,
    InviteResponse,
)
from portal.components.invite import (
    INVALID_INVITE,
    AcceptInviteInput,
    CreateInviteInput,
    ListPendingInput,
    ValidateInviteInput,
    run_accept,
    run_create,
    run_list_pending,
    run_validate,
)
from portal.rules.models import Rules

router = APIRouter()

# Set on a failed accept that left the invite consumed without linking the member
RECONCILE_HEADER = "X-Needs-Reconciliation"


@router.post("", response_model=InviteResponse, status_code=status.HTTP_201_CREATED)
def create_invite(
    req: InviteCreateRequest,
    identity: UUID | None = Depends(get_identity),
    invite_repo: Any = Depends(get_invite_repo),
    community_repo: Any = Depends(get_community_repo),
    member_repo: Any = Depends(get_member_repo),
    policy: Any = Depends(get_policy),
    rules: Rules = Depends(get_rules),
    clock: Any = Depends(get_clock),
) -> InviteResponse:
    """Issue an invite for a community (superadmin or admin of that community)."""
    inp = CreateInviteInput(
        community_id=req.community_id,
        requester=identity,
        expires_at=req.expires_at,
    )
    result = run_create(
        inp,
        invite_repo=invite_repo,
        community_repo=community_repo,
        member_repo=member_repo,
        policy=policy,
        rules=rules.invites,
        time=clock,
    )

    if not result.success:
        raise http_error(result.error_code, result.error)

    return InviteResponse.model_validate(result.invite)


@router.get("", response_model=InviteLookupResponse)
def lookup_invite(
    token: str | None = None,
    invite_repo: Any = Depends(get_invite_repo),
    rules: Rules = Depends(get_rules),
    clock: Any = Depends(get_clock),
) -> InviteLookupResponse:
    """Public lookup by token; used or expired invites read as not found."""
    if not token:
        raise HTTPException(status_code=400, detail="Missing token")

    result = run_validate(ValidateInviteInput(token=token), invite_repo=invite_repo, time=clock)

    if not result.success or result.invite is None:
        raise http_error(result.error_code, result.error)

    expired = result.is_expired and rules.invites.enforce_expiry_on_accept
    if result.is_used or expired:
        raise HTTPException(status_code=404, detail=INVALID_INVITE)

    return InviteLookupResponse(
        **InviteResponse.model_validate(result.invite).model_dump(),
        is_used=result.is_used,
        is_expired=result.is_expired,
    )


@router.post("/accept", response_model=InviteAcceptResponse)
def accept_invite(
    req: InviteAcceptRequest,
    identity: UUID | None = Depends(get_identity),
    invite_repo: Any = Depends(get_invite_repo),
    member_repo: Any = Depends(get_member_repo),
    rules: Rules = Depends(get_rules),
    clock: Any = Depends(get_clock),
) -> InviteAcceptResponse:
    """Consume an invite and link the authenticated member to its community."""
    if req.identity is not None and identity is not None and req.identity != identity:
        raise HTTPException(status_code=403, detail="Identity mismatch")

    inp = AcceptInviteInput(token=req.invite_token or "", identity=identity)
    result = run_accept(
        inp,
        invite_repo=invite_repo,
        member_repo=member_repo,
        rules=rules.invites,
        time=clock,
    )

    if not result.success or result.community_id is None:
        headers = {RECONCILE_HEADER: "true"} if result.needs_reconciliation else None
        raise http_error(
            result.error_code,
            result.error,
            overrides={"downstream_failure": 400},
            headers=headers,
        )

    return InviteAcceptResponse(success=True, community_id=result.community_id)


@router.get("/pending", response_model=list[InviteResponse])
def list_pending_invites(
    community_id: UUID,
    identity: UUID | None = Depends(get_identity),
    invite_repo: Any = Depends(get_invite_repo),
    member_repo: Any = Depends(get_member_repo),
    policy: Any = Depends(get_policy),
    rules: Rules = Depends(get_rules),
    clock: Any = Depends(get_clock),
) -> list[InviteResponse]:
    """List unused, unexpired invites of a community, newest first."""
    inp = ListPendingInput(community_id=community_id, requester=identity)
    result = run_list_pending(
        inp,
        invite_repo=invite_repo,
        member_repo=member_repo,
        policy=policy,
        rules=rules.invites,
        time=clock,
    )

    if not result.success:
        raise http_error(result.error_code, result.error)

    return [InviteResponse.model_validate(i) for i in result.invites]
