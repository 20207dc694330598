"""
Notifications component - Notification recording and the member's inbox.
"""

from .component import run, run_list_own, run_mark_all_read, run_mark_read, run_record
from .models import (
    ListNotificationsInput,
    MarkAllReadInput,
    MarkReadInput,
    MarkReadOutput,
    NotificationListOutput,
    NotificationOutput,
    RecordNotificationInput,
)
from .ports import MemberReaderPort, NotificationRepoPort, TimePort

__all__ = [
    "run",
    "run_record",
    "run_list_own",
    "run_mark_read",
    "run_mark_all_read",
    "RecordNotificationInput",
    "ListNotificationsInput",
    "MarkReadInput",
    "MarkAllReadInput",
    "NotificationOutput",
    "NotificationListOutput",
    "MarkReadOutput",
    "NotificationRepoPort",
    "MemberReaderPort",
    "TimePort",
]
