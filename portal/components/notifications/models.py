from dataclasses import dataclass, field
from uuid import UUID

from portal.domain.entities import Notification
from portal.domain.errors import ErrorCode


@dataclass
class RecordNotificationInput:
    requester: UUID | None
    member_id: UUID | None
    title: str
    content: str
    type: str
    link: str | None = None


@dataclass
class ListNotificationsInput:
    requester: UUID | None
    unread_only: bool = False


@dataclass
class MarkReadInput:
    requester: UUID | None
    notification_id: UUID


@dataclass
class MarkAllReadInput:
    requester: UUID | None


@dataclass
class NotificationOutput:
    notification: Notification | None = None
    success: bool = False
    error: str | None = None
    error_code: ErrorCode | None = None


@dataclass
class NotificationListOutput:
    notifications: list[Notification] = field(default_factory=list)
    success: bool = False
    error: str | None = None
    error_code: ErrorCode | None = None


@dataclass
class MarkReadOutput:
    updated: int = 0
    success: bool = False
    error: str | None = None
    error_code: ErrorCode | None = None
