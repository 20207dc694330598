"""
Notifications component - record notification rows and let members read them.

Rows are only stored; delivery is someone else's job. A member can list and
mark read only their own notifications.
"""

from __future__ import annotations

import logging

from portal.domain.entities import Notification
from portal.ports.repo import StoreError
from portal.rules.models import NotificationRules

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

logger = logging.getLogger(__name__)


def run_record(
    inp: RecordNotificationInput,
    notification_repo: NotificationRepoPort,
    member_repo: MemberReaderPort,
    time: TimePort,
) -> NotificationOutput:
    if inp.requester is None:
        return NotificationOutput(error="Not authenticated", error_code="unauthenticated")

    if inp.member_id is None or not inp.title or not inp.content or not inp.type:
        return NotificationOutput(
            error="Missing required notification fields", error_code="invalid_input"
        )

    try:
        if member_repo.get_by_id(inp.member_id) is None:
            return NotificationOutput(error="Member not found", error_code="not_found")

        notification = Notification(
            member_id=inp.member_id,
            title=inp.title,
            content=inp.content,
            type=inp.type,
            link=inp.link,
            is_read=False,
            created_at=time.now_utc(),
        )
        notification_repo.insert(notification)
    except StoreError as e:
        logger.error("Notification insert failed for member %s: %s", inp.member_id, e)
        return NotificationOutput(
            error="Failed to create notification", error_code="downstream_failure"
        )

    logger.info("Notification %s recorded for member %s", notification.id, inp.member_id)
    return NotificationOutput(notification=notification, success=True)


def run_list_own(
    inp: ListNotificationsInput,
    notification_repo: NotificationRepoPort,
    rules: NotificationRules,
) -> NotificationListOutput:
    """The caller's own notifications, newest first."""
    if inp.requester is None:
        return NotificationListOutput(error="Not authenticated", error_code="unauthenticated")

    try:
        notifications = notification_repo.list_for_member(
            inp.requester, unread_only=inp.unread_only, limit=rules.list_limit
        )
    except StoreError as e:
        logger.error("Notification listing failed for %s: %s", inp.requester, e)
        return NotificationListOutput(
            error="Notification lookup failed", error_code="downstream_failure"
        )

    return NotificationListOutput(notifications=notifications, success=True)


def run_mark_read(inp: MarkReadInput, notification_repo: NotificationRepoPort) -> MarkReadOutput:
    if inp.requester is None:
        return MarkReadOutput(error="Not authenticated", error_code="unauthenticated")

    try:
        found = notification_repo.mark_read(inp.notification_id, inp.requester)
    except StoreError as e:
        logger.error("Marking notification %s read failed: %s", inp.notification_id, e)
        return MarkReadOutput(
            error="Failed to update notification", error_code="downstream_failure"
        )

    # Someone else's notification reads as not found
    if not found:
        return MarkReadOutput(error="Notification not found", error_code="not_found")
    return MarkReadOutput(updated=1, success=True)


def run_mark_all_read(
    inp: MarkAllReadInput, notification_repo: NotificationRepoPort
) -> MarkReadOutput:
    if inp.requester is None:
        return MarkReadOutput(error="Not authenticated", error_code="unauthenticated")

    try:
        updated = notification_repo.mark_all_read(inp.requester)
    except StoreError as e:
        logger.error("Marking notifications read failed for %s: %s", inp.requester, e)
        return MarkReadOutput(
            error="Failed to update notifications", error_code="downstream_failure"
        )

    logger.info("Marked %d notifications read for %s", updated, inp.requester)
    return MarkReadOutput(updated=updated, success=True)


def run(
    inp: RecordNotificationInput | ListNotificationsInput | MarkReadInput | MarkAllReadInput,
    *,
    notification_repo: NotificationRepoPort,
    member_repo: MemberReaderPort | None = None,  # record
    time: TimePort | None = None,  # record
    rules: NotificationRules | None = None,  # list
) -> NotificationOutput | NotificationListOutput | MarkReadOutput:
    if isinstance(inp, RecordNotificationInput):
        assert member_repo and time
        return run_record(inp, notification_repo, member_repo, time)
    elif isinstance(inp, ListNotificationsInput):
        return run_list_own(inp, notification_repo, rules or NotificationRules())
    elif isinstance(inp, MarkReadInput):
        return run_mark_read(inp, notification_repo)
    elif isinstance(inp, MarkAllReadInput):
        return run_mark_all_read(inp, notification_repo)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
