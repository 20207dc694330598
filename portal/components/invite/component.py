"""
Invite component - issue, validate and accept single-use community invites.

Acceptance claims the invite first (conditional used=false -> true) and only
then links the member. A failed member write releases the claim; if the
release fails too the invite is left consumed and logged for reconciliation.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, timedelta
from uuid import uuid4

from portal.components.authz import ClassifyInput, run_classify
from portal.domain.entities import Invite
from portal.domain.policy import PolicyEngine
from portal.ports.repo import StoreConflictError, StoreError
from portal.rules.models import InviteRules

from .models import (
    AcceptInviteInput,
    AcceptOutput,
    CreateInviteInput,
    InviteListOutput,
    InviteOutput,
    ListPendingInput,
    ValidateInviteInput,
    ValidateOutput,
)
from .ports import CommunityRepoPort, InviteRepoPort, MemberRepoPort, TimePort

logger = logging.getLogger(__name__)

INVALID_INVITE = "Invalid or expired invite"


def new_invite_token() -> str:
    return str(uuid4())


def run_create(
    inp: CreateInviteInput,
    invite_repo: InviteRepoPort,
    community_repo: CommunityRepoPort,
    member_repo: MemberRepoPort,
    policy: PolicyEngine,
    rules: InviteRules,
    time: TimePort,
    token_factory: Callable[[], str] = new_invite_token,
) -> InviteOutput:
    if inp.requester is None:
        return InviteOutput(error="Not authenticated", error_code="unauthenticated")

    if inp.community_id is None:
        return InviteOutput(error="Missing community_id", error_code="invalid_input")

    now = time.now_utc()
    expires_at = inp.expires_at
    if expires_at is not None and expires_at.tzinfo is None:
        # Naive timestamps are taken as UTC
        expires_at = expires_at.replace(tzinfo=UTC)
    if expires_at is not None and expires_at <= now:
        return InviteOutput(error="expires_at must be in the future", error_code="invalid_input")

    authz = run_classify(ClassifyInput(identity=inp.requester), member_repo, policy)
    if not policy.can_issue_invites(authz.privilege, inp.community_id):
        return InviteOutput(error="Unauthorized", error_code="unauthorized")

    try:
        community = community_repo.get_by_id(inp.community_id)
    except StoreError as e:
        logger.error("Community lookup failed for %s: %s", inp.community_id, e)
        return InviteOutput(error="Community lookup failed", error_code="downstream_failure")
    if community is None:
        return InviteOutput(error="Community not found", error_code="not_found")

    if expires_at is None and rules.default_ttl_days is not None:
        expires_at = now + timedelta(days=rules.default_ttl_days)

    invite = Invite(
        id=uuid4(),
        community_id=inp.community_id,
        invite_token=token_factory(),
        expires_at=expires_at,
        used=False,
        created_by=inp.requester,
        created_at=now,
    )

    try:
        invite_repo.insert(invite)
    except StoreConflictError:
        logger.warning("Invite token collision for community %s", inp.community_id)
        return InviteOutput(error="Invite token already exists", error_code="conflict")
    except StoreError as e:
        logger.error("Invite insert failed for community %s: %s", inp.community_id, e)
        return InviteOutput(error="Failed to create invite", error_code="downstream_failure")

    logger.info(
        "Invite %s issued for community %s by %s", invite.id, invite.community_id, inp.requester
    )
    return InviteOutput(invite=invite, success=True)


def run_validate(
    inp: ValidateInviteInput,
    invite_repo: InviteRepoPort,
    time: TimePort,
) -> ValidateOutput:
    """Read-only lookup by exact token; reports used/expired flags without enforcing them."""
    if not inp.token:
        return ValidateOutput(error="Missing invite_token", error_code="invalid_input")

    try:
        invite = invite_repo.get_by_token(inp.token)
    except StoreError as e:
        logger.error("Invite lookup failed: %s", e)
        return ValidateOutput(error="Invite lookup failed", error_code="downstream_failure")

    if invite is None:
        return ValidateOutput(error=INVALID_INVITE, error_code="not_found")

    return ValidateOutput(
        invite=invite,
        is_used=invite.used,
        is_expired=invite.is_expired(time.now_utc()),
        success=True,
    )


def run_accept(
    inp: AcceptInviteInput,
    invite_repo: InviteRepoPort,
    member_repo: MemberRepoPort,
    rules: InviteRules,
    time: TimePort,
) -> AcceptOutput:
    if not inp.token:
        return AcceptOutput(error="Missing invite_token", error_code="invalid_input")

    if inp.identity is None:
        return AcceptOutput(error="Not authenticated", error_code="unauthenticated")

    now = time.now_utc()

    # 1. Claim: only one caller can flip used for a given token
    try:
        invite = invite_repo.claim(
            inp.token, inp.identity, now, enforce_expiry=rules.enforce_expiry_on_accept
        )
    except StoreError as e:
        logger.error("Invite claim failed: %s", e)
        return AcceptOutput(error="Invite update failed", error_code="downstream_failure")

    if invite is None:
        return AcceptOutput(error=INVALID_INVITE, error_code="not_found")

    # 2. Link the member
    failure: str
    try:
        if member_repo.set_community(inp.identity, invite.community_id, now):
            logger.info(
                "Member %s joined community %s via invite %s",
                inp.identity,
                invite.community_id,
                invite.id,
            )
            return AcceptOutput(community_id=invite.community_id, success=True)
        failure = "Member record not found"
    except StoreError as e:
        logger.error("Member %s update failed: %s", inp.identity, e)
        failure = "Member update failed"

    # 3. Compensate
    try:
        released = invite_repo.release(invite.id)
    except StoreError as e:
        logger.error("Invite %s release failed: %s", invite.id, e)
        released = False

    if not released:
        logger.error(
            "RECONCILE: invite %s consumed but member %s not linked to community %s (%s)",
            invite.id,
            inp.identity,
            invite.community_id,
            failure,
        )
        return AcceptOutput(
            error=failure, error_code="downstream_failure", needs_reconciliation=True
        )

    logger.warning(
        "Invite %s released after failed acceptance by %s: %s", invite.id, inp.identity, failure
    )
    return AcceptOutput(error=failure, error_code="downstream_failure")


def run_list_pending(
    inp: ListPendingInput,
    invite_repo: InviteRepoPort,
    member_repo: MemberRepoPort,
    policy: PolicyEngine,
    rules: InviteRules,
    time: TimePort,
) -> InviteListOutput:
    if inp.requester is None:
        return InviteListOutput(error="Not authenticated", error_code="unauthenticated")

    authz = run_classify(ClassifyInput(identity=inp.requester), member_repo, policy)
    if not policy.can_administer(authz.privilege, inp.community_id):
        return InviteListOutput(error="Unauthorized", error_code="unauthorized")

    try:
        invites = invite_repo.list_pending(
            inp.community_id, time.now_utc(), rules.pending_list_limit
        )
    except StoreError as e:
        logger.error("Pending invite listing failed for %s: %s", inp.community_id, e)
        return InviteListOutput(error="Invite lookup failed", error_code="downstream_failure")

    return InviteListOutput(invites=invites, success=True)


def run(
    inp: CreateInviteInput | ValidateInviteInput | AcceptInviteInput | ListPendingInput,
    *,
    invite_repo: InviteRepoPort,
    time: TimePort,
    member_repo: MemberRepoPort | None = None,  # create, accept, list
    community_repo: CommunityRepoPort | None = None,  # create
    policy: PolicyEngine | None = None,  # create, list
    rules: InviteRules | None = None,  # create, accept, list
) -> InviteOutput | ValidateOutput | AcceptOutput | InviteListOutput:
    if isinstance(inp, CreateInviteInput):
        assert community_repo and member_repo and policy and rules
        return run_create(inp, invite_repo, community_repo, member_repo, policy, rules, time)

    elif isinstance(inp, ValidateInviteInput):
        return run_validate(inp, invite_repo, time)

    elif isinstance(inp, AcceptInviteInput):
        assert member_repo and rules
        return run_accept(inp, invite_repo, member_repo, rules, time)

    elif isinstance(inp, ListPendingInput):
        assert member_repo and policy and rules
        return run_list_pending(inp, invite_repo, member_repo, policy, rules, time)

    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
