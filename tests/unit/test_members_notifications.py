from datetime import timedelta
from uuid import uuid4

import pytest

from portal.components.members import (
    GetSelfInput,
    ListMembersInput,
    run_get_self,
    run_list_members,
)
from portal.components.notifications import (
    ListNotificationsInput,
    MarkAllReadInput,
    MarkReadInput,
    RecordNotificationInput,
    run,
    run_list_own,
    run_mark_all_read,
    run_mark_read,
    run_record,
)
from portal.domain.entities import Member, Notification


@pytest.fixture
def club_id():
    return uuid4()


@pytest.fixture
def people(member_repo, club_id):
    admin = member_repo.save(
        Member(id=uuid4(), email="a@example.com", role="admin", community_id=club_id)
    )
    member = member_repo.save(
        Member(id=uuid4(), email="m@example.com", role="financial", community_id=club_id)
    )
    outsider = member_repo.save(
        Member(id=uuid4(), email="o@example.com", role="non_financial", community_id=uuid4())
    )
    drifter = member_repo.save(Member(id=uuid4(), email="d@example.com", role="financial"))
    return {"admin": admin, "member": member, "outsider": outsider, "drifter": drifter}


# --- Members ---


def test_get_self(member_repo, people):
    result = run_get_self(GetSelfInput(requester=people["member"].id), member_repo)

    assert result.success
    assert result.member.email == "m@example.com"


def test_get_self_not_found(member_repo):
    assert run_get_self(GetSelfInput(requester=uuid4()), member_repo).error_code == "not_found"


def test_get_self_unauthenticated(member_repo):
    result = run_get_self(GetSelfInput(requester=None), member_repo)

    assert result.error_code == "unauthenticated"


def test_list_own_community(member_repo, policy, people):
    result = run_list_members(ListMembersInput(requester=people["member"].id), member_repo, policy)

    assert result.success
    assert {m.id for m in result.members} == {people["admin"].id, people["member"].id}


def test_list_all_as_admin(member_repo, policy, people):
    result = run_list_members(
        ListMembersInput(requester=people["admin"].id, all=True), member_repo, policy
    )

    assert len(result.members) == 4


def test_list_all_ignored_for_regular_member(member_repo, policy, people):
    result = run_list_members(
        ListMembersInput(requester=people["member"].id, all=True), member_repo, policy
    )

    assert len(result.members) == 2


def test_list_without_community_refused(member_repo, policy, people):
    result = run_list_members(ListMembersInput(requester=people["drifter"].id), member_repo, policy)

    assert result.error_code == "unauthorized"


def test_list_store_failure(member_repo, policy, people):
    member_repo.fail_on.add("list_by_community")

    result = run_list_members(ListMembersInput(requester=people["member"].id), member_repo, policy)

    assert result.error_code == "downstream_failure"


# --- Notifications ---


def test_record_notification(notification_repo, member_repo, clock, people):
    target = people["member"].id

    result = run_record(
        RecordNotificationInput(
            requester=people["admin"].id,
            member_id=target,
            title="Welcome",
            content="You joined the club",
            type="invite",
            link="/dashboard",
        ),
        notification_repo,
        member_repo,
        clock,
    )

    assert result.success
    stored = notification_repo.list_for_member(target)
    assert len(stored) == 1
    assert stored[0].is_read is False
    assert stored[0].created_at == clock.now_utc()


@pytest.mark.parametrize("missing", ["title", "content", "type"])
def test_record_requires_fields(notification_repo, member_repo, clock, people, missing):
    fields = {"title": "t", "content": "c", "type": "x"}
    fields[missing] = ""

    result = run_record(
        RecordNotificationInput(requester=people["admin"].id, member_id=people["member"].id,
                                **fields),
        notification_repo,
        member_repo,
        clock,
    )

    assert result.error_code == "invalid_input"
    assert notification_repo.list_for_member(people["member"].id) == []


def test_record_requires_member_id(notification_repo, member_repo, clock, people):
    result = run_record(
        RecordNotificationInput(
            requester=people["admin"].id, member_id=None, title="t", content="c", type="x"
        ),
        notification_repo,
        member_repo,
        clock,
    )

    assert result.error_code == "invalid_input"


def test_record_unknown_member(notification_repo, member_repo, clock, people):
    result = run(
        RecordNotificationInput(
            requester=people["admin"].id, member_id=uuid4(), title="t", content="c", type="x"
        ),
        notification_repo=notification_repo,
        member_repo=member_repo,
        time=clock,
    )

    assert result.error_code == "not_found"


def test_record_unauthenticated(notification_repo, member_repo, clock, people):
    result = run_record(
        RecordNotificationInput(
            requester=None, member_id=people["member"].id, title="t", content="c", type="x"
        ),
        notification_repo,
        member_repo,
        clock,
    )

    assert result.error_code == "unauthenticated"


# --- Notification inbox ---


@pytest.fixture
def inbox(notification_repo, people, clock):
    member = people["member"].id
    rows = []
    for i, title in enumerate(["Old", "Middle", "New"]):
        rows.append(
            notification_repo.insert(
                Notification(
                    member_id=member,
                    title=title,
                    content="c",
                    type="announcement",
                    created_at=clock.now_utc() + timedelta(minutes=i),
                )
            )
        )
    notification_repo.insert(
        Notification(member_id=people["admin"].id, title="Not yours", content="c", type="x")
    )
    return rows


def test_list_own_newest_first(notification_repo, rules, people, inbox):
    result = run_list_own(
        ListNotificationsInput(requester=people["member"].id),
        notification_repo,
        rules.notifications,
    )

    assert result.success
    assert [n.title for n in result.notifications] == ["New", "Middle", "Old"]


def test_list_own_respects_limit(notification_repo, rules, people, inbox):
    limited = rules.notifications.model_copy(update={"list_limit": 2})

    result = run_list_own(
        ListNotificationsInput(requester=people["member"].id), notification_repo, limited
    )

    assert len(result.notifications) == 2


def test_list_own_unauthenticated(notification_repo, rules):
    result = run_list_own(
        ListNotificationsInput(requester=None), notification_repo, rules.notifications
    )

    assert result.error_code == "unauthenticated"


def test_list_own_store_failure(notification_repo, rules, people):
    notification_repo.fail_on.add("list_for_member")

    result = run_list_own(
        ListNotificationsInput(requester=people["member"].id),
        notification_repo,
        rules.notifications,
    )

    assert result.error_code == "downstream_failure"


def test_mark_read(notification_repo, rules, people, inbox):
    member = people["member"].id

    result = run_mark_read(
        MarkReadInput(requester=member, notification_id=inbox[0].id), notification_repo
    )

    assert result.success
    unread = run_list_own(
        ListNotificationsInput(requester=member, unread_only=True),
        notification_repo,
        rules.notifications,
    )
    assert [n.title for n in unread.notifications] == ["New", "Middle"]


def test_mark_read_other_members_notification(notification_repo, people, inbox):
    result = run_mark_read(
        MarkReadInput(requester=people["admin"].id, notification_id=inbox[0].id),
        notification_repo,
    )

    assert result.error_code == "not_found"
    assert not any(n.is_read for n in notification_repo.list_for_member(people["member"].id))


def test_mark_read_unauthenticated(notification_repo, inbox):
    result = run_mark_read(
        MarkReadInput(requester=None, notification_id=inbox[0].id), notification_repo
    )

    assert result.error_code == "unauthenticated"


def test_mark_all_read(notification_repo, people, inbox):
    member = people["member"].id

    result = run(MarkAllReadInput(requester=member), notification_repo=notification_repo)

    assert result.updated == 3
    assert notification_repo.list_for_member(member, unread_only=True) == []
    # Other members' notifications stay unread
    assert len(notification_repo.list_for_member(people["admin"].id, unread_only=True)) == 1


def test_mark_all_read_store_failure(notification_repo, people):
    notification_repo.fail_on.add("mark_all_read")

    result = run_mark_all_read(MarkAllReadInput(requester=people["member"].id), notification_repo)

    assert result.error_code == "downstream_failure"
