from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, status

from portal.api.deps import (
    get_clock,
    get_identity,
    get_member_repo,
    get_notification_repo,
    get_rules,
)
from portal.api.errors import http_error
from portal.api.schemas import (
    MarkReadResponse,
    NotificationCreateRequest,
    NotificationResponse,
)
from portal.components.notifications import (
    ListNotificationsInput,
    MarkAllReadInput,
    MarkReadInput,
    RecordNotificationInput,
    run_list_own,
    run_mark_all_read,
    run_mark_read,
    run_record,
)
from portal.rules.models import Rules

router = APIRouter()


@router.post("", response_model=NotificationResponse, status_code=status.HTTP_201_CREATED)
def create_notification(
    req: NotificationCreateRequest,
    identity: UUID | None = Depends(get_identity),
    notification_repo: Any = Depends(get_notification_repo),
    member_repo: Any = Depends(get_member_repo),
    clock: Any = Depends(get_clock),
) -> NotificationResponse:
    inp = RecordNotificationInput(
        requester=identity,
        member_id=req.member_id,
        title=req.title,
        content=req.content,
        type=req.type,
        link=req.link,
    )
    result = run_record(
        inp,
        notification_repo=notification_repo,
        member_repo=member_repo,
        time=clock,
    )

    if not result.success:
        raise http_error(result.error_code, result.error)

    return NotificationResponse.model_validate(result.notification)


@router.get("", response_model=list[NotificationResponse])
def list_my_notifications(
    unread_only: bool = False,
    identity: UUID | None = Depends(get_identity),
    notification_repo: Any = Depends(get_notification_repo),
    rules: Rules = Depends(get_rules),
) -> list[NotificationResponse]:
    """The caller's notifications, newest first."""
    result = run_list_own(
        ListNotificationsInput(requester=identity, unread_only=unread_only),
        notification_repo=notification_repo,
        rules=rules.notifications,
    )

    if not result.success:
        raise http_error(result.error_code, result.error)

    return [NotificationResponse.model_validate(n) for n in result.notifications]


@router.post("/read-all", response_model=MarkReadResponse)
def mark_all_read(
    identity: UUID | None = Depends(get_identity),
    notification_repo: Any = Depends(get_notification_repo),
) -> MarkReadResponse:
    result = run_mark_all_read(
        MarkAllReadInput(requester=identity), notification_repo=notification_repo
    )

    if not result.success:
        raise http_error(result.error_code, result.error)

    return MarkReadResponse(success=True, updated=result.updated)


@router.patch("/{notification_id}/read", response_model=MarkReadResponse)
def mark_read(
    notification_id: UUID,
    identity: UUID | None = Depends(get_identity),
    notification_repo: Any = Depends(get_notification_repo),
) -> MarkReadResponse:
    result = run_mark_read(
        MarkReadInput(requester=identity, notification_id=notification_id),
        notification_repo=notification_repo,
    )

    if not result.success:
        raise http_error(result.error_code, result.error)

    return MarkReadResponse(success=True, updated=result.updated)
