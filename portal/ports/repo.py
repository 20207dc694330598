"""
Repository ports for the relational store.

Adapters translate driver errors into the StoreError hierarchy below so that
components can classify failures without importing a database driver.
"""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from portal.domain.entities import Community, Invite, Member, Notification


class StoreError(Exception):
    """Base class for store read/write failures."""


class StoreConflictError(StoreError):
    """Raised when a write violates a uniqueness constraint."""

    def __init__(self, table: str, detail: str = "") -> None:
        self.table = table
        super().__init__(f"Unique constraint violated on {table}: {detail}".rstrip(": "))


class StoreUnavailableError(StoreError):
    """Raised when the store cannot be reached or the statement fails."""


class MemberRepoPort(Protocol):
    def get_by_id(self, member_id: UUID) -> Member | None:
        ...

    def insert(self, member: Member) -> Member:
        """Insert a new member. Raises StoreConflictError on a duplicate id or email."""
        ...

    def save(self, member: Member) -> Member:
        ...

    def set_community(self, member_id: UUID, community_id: UUID, now_utc: datetime) -> bool:
        """Link a member to a community. Returns False when no member row matched."""
        ...

    def list_by_community(self, community_id: UUID) -> list[Member]:
        ...

    def list_all(self) -> list[Member]:
        ...


class CommunityRepoPort(Protocol):
    def get_by_id(self, community_id: UUID) -> Community | None:
        ...

    def save(self, community: Community) -> Community:
        ...

    def delete(self, community_id: UUID) -> bool:
        ...

    def list_all(self) -> list[Community]:
        ...


class InviteRepoPort(Protocol):
    def insert(self, invite: Invite) -> Invite:
        """Insert a new invite. Raises StoreConflictError on a duplicate token."""
        ...

    def get_by_token(self, token: str) -> Invite | None:
        ...

    def claim(
        self, token: str, member_id: UUID, now_utc: datetime, enforce_expiry: bool
    ) -> Invite | None:
        """
        Atomically flip used false -> true for an unused invite.

        Returns the claimed invite, or None when nothing matched (unknown,
        already used, or expired while enforce_expiry is set).
        """
        ...

    def release(self, invite_id: UUID) -> bool:
        """Undo a claim. Returns False when the invite was not in the used state."""
        ...

    def list_pending(self, community_id: UUID, now_utc: datetime, limit: int) -> list[Invite]:
        ...


class NotificationRepoPort(Protocol):
    def insert(self, notification: Notification) -> Notification:
        ...

    def list_for_member(
        self, member_id: UUID, unread_only: bool = False, limit: int = 100
    ) -> list[Notification]:
        """Newest first."""
        ...

    def mark_read(self, notification_id: UUID, member_id: UUID) -> bool:
        """Returns False when no notification with that id belongs to the member."""
        ...

    def mark_all_read(self, member_id: UUID) -> int:
        """Returns the number of notifications that were unread."""
        ...
