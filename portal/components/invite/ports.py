from datetime import datetime
from typing import Protocol
from uuid import UUID

from portal.domain.entities import Community, Invite, Member


class InviteRepoPort(Protocol):
    def insert(self, invite: Invite) -> Invite: ...
    def get_by_token(self, token: str) -> Invite | None: ...
    def claim(
        self, token: str, member_id: UUID, now_utc: datetime, enforce_expiry: bool
    ) -> Invite | None: ...
    def release(self, invite_id: UUID) -> bool: ...
    def list_pending(self, community_id: UUID, now_utc: datetime, limit: int) -> list[Invite]: ...


class MemberRepoPort(Protocol):
    def get_by_id(self, member_id: UUID) -> Member | None: ...
    def set_community(self, member_id: UUID, community_id: UUID, now_utc: datetime) -> bool: ...


class CommunityRepoPort(Protocol):
    def get_by_id(self, community_id: UUID) -> Community | None: ...


class TimePort(Protocol):
    """Port for time operations - enables deterministic testing."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
