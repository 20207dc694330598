from datetime import UTC, datetime
from pathlib import Path
from uuid import UUID

import pytest

from portal.adapters.clock import FixedClock
from portal.adapters.sqlite.migrator import SQLiteMigrator
from portal.domain.entities import Community, Invite, Member, Notification
from portal.domain.policy import PolicyEngine
from portal.ports.repo import StoreConflictError, StoreUnavailableError
from portal.rules.loader import load_rules

ROOT = Path(__file__).resolve().parent.parent


# --- In-memory fakes ---


class _Failing:
    """Mixin: methods named in `fail_on` raise StoreUnavailableError."""

    def __init__(self) -> None:
        self.fail_on: set[str] = set()

    def _check(self, method: str) -> None:
        if method in self.fail_on:
            raise StoreUnavailableError(f"{method} unavailable")


class InMemoryMemberRepo(_Failing):
    def __init__(self) -> None:
        super().__init__()
        self._members: dict[UUID, Member] = {}

    def get_by_id(self, member_id: UUID) -> Member | None:
        self._check("get_by_id")
        return self._members.get(member_id)

    def insert(self, member: Member) -> Member:
        self._check("insert")
        if member.id in self._members or any(
            m.email == member.email for m in self._members.values()
        ):
            raise StoreConflictError("members", "id or email")
        self._members[member.id] = member
        return member

    def save(self, member: Member) -> Member:
        self._check("save")
        self._members[member.id] = member
        return member

    def set_community(self, member_id: UUID, community_id: UUID, now_utc: datetime) -> bool:
        self._check("set_community")
        member = self._members.get(member_id)
        if member is None:
            return False
        self._members[member_id] = member.model_copy(
            update={"community_id": community_id, "updated_at": now_utc}
        )
        return True

    def list_by_community(self, community_id: UUID) -> list[Member]:
        self._check("list_by_community")
        return [m for m in self._members.values() if m.community_id == community_id]

    def list_all(self) -> list[Member]:
        self._check("list_all")
        return list(self._members.values())


class InMemoryCommunityRepo(_Failing):
    def __init__(self) -> None:
        super().__init__()
        self._communities: dict[UUID, Community] = {}

    def get_by_id(self, community_id: UUID) -> Community | None:
        self._check("get_by_id")
        return self._communities.get(community_id)

    def save(self, community: Community) -> Community:
        self._check("save")
        self._communities[community.id] = community
        return community

    def delete(self, community_id: UUID) -> bool:
        self._check("delete")
        return self._communities.pop(community_id, None) is not None

    def list_all(self) -> list[Community]:
        self._check("list_all")
        return list(self._communities.values())


class InMemoryInviteRepo(_Failing):
    def __init__(self) -> None:
        super().__init__()
        self._invites: dict[UUID, Invite] = {}

    def insert(self, invite: Invite) -> Invite:
        self._check("insert")
        if any(i.invite_token == invite.invite_token for i in self._invites.values()):
            raise StoreConflictError("community_invites", "invite_token")
        self._invites[invite.id] = invite
        return invite

    def get_by_token(self, token: str) -> Invite | None:
        self._check("get_by_token")
        for invite in self._invites.values():
            if invite.invite_token == token:
                return invite
        return None

    def claim(
        self, token: str, member_id: UUID, now_utc: datetime, enforce_expiry: bool
    ) -> Invite | None:
        self._check("claim")
        invite = self.get_by_token(token)
        if invite is None or invite.used:
            return None
        if enforce_expiry and invite.is_expired(now_utc):
            return None
        claimed = invite.model_copy(update={"used": True, "used_by": member_id, "used_at": now_utc})
        self._invites[invite.id] = claimed
        return claimed

    def release(self, invite_id: UUID) -> bool:
        self._check("release")
        invite = self._invites.get(invite_id)
        if invite is None or not invite.used:
            return False
        self._invites[invite_id] = invite.model_copy(
            update={"used": False, "used_by": None, "used_at": None}
        )
        return True

    def list_pending(self, community_id: UUID, now_utc: datetime, limit: int) -> list[Invite]:
        self._check("list_pending")
        pending = [
            i
            for i in self._invites.values()
            if i.community_id == community_id and not i.used and not i.is_expired(now_utc)
        ]
        pending.sort(key=lambda i: i.created_at, reverse=True)
        return pending[:limit]

    def all(self) -> list[Invite]:
        return list(self._invites.values())


class InMemoryNotificationRepo(_Failing):
    def __init__(self) -> None:
        super().__init__()
        self._rows: list[Notification] = []

    def insert(self, notification: Notification) -> Notification:
        self._check("insert")
        self._rows.append(notification)
        return notification

    def list_for_member(
        self, member_id: UUID, unread_only: bool = False, limit: int = 100
    ) -> list[Notification]:
        self._check("list_for_member")
        rows = [
            n for n in self._rows if n.member_id == member_id and not (unread_only and n.is_read)
        ]
        rows.sort(key=lambda n: n.created_at, reverse=True)
        return rows[:limit]

    def mark_read(self, notification_id: UUID, member_id: UUID) -> bool:
        self._check("mark_read")
        for i, n in enumerate(self._rows):
            if n.id == notification_id and n.member_id == member_id:
                self._rows[i] = n.model_copy(update={"is_read": True})
                return True
        return False

    def mark_all_read(self, member_id: UUID) -> int:
        self._check("mark_all_read")
        updated = 0
        for i, n in enumerate(self._rows):
            if n.member_id == member_id and not n.is_read:
                self._rows[i] = n.model_copy(update={"is_read": True})
                updated += 1
        return updated


# --- Fixtures ---


@pytest.fixture
def rules():
    return load_rules(ROOT / "rules.yaml")


@pytest.fixture
def policy(rules):
    return PolicyEngine(rules)


@pytest.fixture
def clock():
    return FixedClock(datetime(2025, 1, 1, 12, 0, tzinfo=UTC))


@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / "portal.db")
    SQLiteMigrator(path, str(ROOT / "migrations")).run_migrations()
    return path


@pytest.fixture
def member_repo():
    return InMemoryMemberRepo()


@pytest.fixture
def community_repo():
    return InMemoryCommunityRepo()


@pytest.fixture
def invite_repo():
    return InMemoryInviteRepo()


@pytest.fixture
def notification_repo():
    return InMemoryNotificationRepo()
