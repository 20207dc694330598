"""
End-to-end onboarding against SQLite: an admin issues an invite, a newcomer
accepts it and joins the community.
"""

from datetime import UTC, datetime
from uuid import uuid4

import pytest

from portal.adapters.clock import FixedClock
from portal.adapters.sqlite.repos import SQLiteCommunityRepo, SQLiteInviteRepo, SQLiteMemberRepo
from portal.components.invite import (
    AcceptInviteInput,
    CreateInviteInput,
    ValidateInviteInput,
    run,
)
from portal.domain.entities import Community, Member


@pytest.fixture
def ctx(db_path, policy, rules):
    clock = FixedClock(datetime(2025, 6, 1, 8, 0, tzinfo=UTC))
    return {
        "invite_repo": SQLiteInviteRepo(db_path),
        "member_repo": SQLiteMemberRepo(db_path),
        "community_repo": SQLiteCommunityRepo(db_path),
        "policy": policy,
        "rules": rules.invites,
        "time": clock,
    }


def test_onboarding_scenario(ctx):
    communities = ctx["community_repo"]
    members = ctx["member_repo"]

    c1 = communities.save(Community(name="Northside Choir"))
    admin = members.save(
        Member(id=uuid4(), email="director@example.com", role="admin", community_id=c1.id)
    )
    newcomer = members.save(Member(id=uuid4(), email="alto@example.com"))

    # 1. Admin issues an invite
    created = run(CreateInviteInput(community_id=c1.id, requester=admin.id), **ctx)
    assert created.success
    token = created.invite.invite_token

    # 2. Anyone can look it up
    looked_up = run(ValidateInviteInput(token=token), **ctx)
    assert looked_up.success
    assert looked_up.invite.community_id == c1.id
    assert looked_up.is_used is False

    # 3. Anonymous acceptance is refused and leaves the invite untouched
    anonymous = run(AcceptInviteInput(token=token, identity=None), **ctx)
    assert anonymous.error_code == "unauthenticated"
    assert run(ValidateInviteInput(token=token), **ctx).is_used is False

    # 4. The newcomer accepts
    accepted = run(AcceptInviteInput(token=token, identity=newcomer.id), **ctx)
    assert accepted.success
    assert accepted.community_id == c1.id
    assert members.get_by_id(newcomer.id).community_id == c1.id

    # 5. A repeat is refused
    repeat = run(AcceptInviteInput(token=token, identity=newcomer.id), **ctx)
    assert repeat.error_code == "not_found"

    after = run(ValidateInviteInput(token=token), **ctx)
    assert after.is_used is True
    assert after.invite.used_by == newcomer.id


def test_unprivileged_issue_leaves_no_row(ctx, db_path):
    c1 = ctx["community_repo"].save(Community(name="Northside Choir"))
    member = ctx["member_repo"].save(
        Member(id=uuid4(), email="tenor@example.com", role="financial", community_id=c1.id)
    )

    result = run(CreateInviteInput(community_id=c1.id, requester=member.id), **ctx)

    assert result.error_code == "unauthorized"
    assert ctx["invite_repo"].list_pending(c1.id, ctx["time"].now_utc(), 10) == []


def test_failed_member_link_keeps_token_usable(ctx):
    c1 = ctx["community_repo"].save(Community(name="Northside Choir"))
    admin = ctx["member_repo"].save(
        Member(id=uuid4(), email="director@example.com", role="admin", community_id=c1.id)
    )
    created = run(CreateInviteInput(community_id=c1.id, requester=admin.id), **ctx)
    token = created.invite.invite_token

    # Identity with no member row: the claim is released
    ghost = run(AcceptInviteInput(token=token, identity=uuid4()), **ctx)
    assert ghost.error_code == "downstream_failure"
    assert not ghost.needs_reconciliation

    newcomer = ctx["member_repo"].save(Member(id=uuid4(), email="bass@example.com"))
    assert run(AcceptInviteInput(token=token, identity=newcomer.id), **ctx).success
