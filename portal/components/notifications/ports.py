from datetime import datetime
from typing import Protocol
from uuid import UUID

from portal.domain.entities import Member, Notification


class NotificationRepoPort(Protocol):
    def insert(self, notification: Notification) -> Notification: ...
    def list_for_member(
        self, member_id: UUID, unread_only: bool = False, limit: int = 100
    ) -> list[Notification]: ...
    def mark_read(self, notification_id: UUID, member_id: UUID) -> bool: ...
    def mark_all_read(self, member_id: UUID) -> int: ...


class MemberReaderPort(Protocol):
    def get_by_id(self, member_id: UUID) -> Member | None: ...


class TimePort(Protocol):
    def now_utc(self) -> datetime: ...
