"""Notification endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from quickdesk.core.security import get_current_account, get_current_admin
from quickdesk.interfaces.http.deps import get_notification_service
from quickdesk.modules.accounts.models import Account
from quickdesk.modules.notifications.exceptions import (
    InvalidRecipientError,
    NotificationAccessDeniedError,
    NotificationNotFoundError,
)
from quickdesk.modules.notifications.models import NotificationCreateInput, NotificationQuery
from quickdesk.modules.notifications.service import NotificationService
from quickdesk.schemas import (
    ApiResponse,
    DeletedCount,
    ModifiedCount,
    NotificationCreate,
    NotificationListPayload,
    NotificationOut,
    NotificationPagination,
    NotificationPayload,
    NotificationStatsOut,
    NotificationType,
)

router = APIRouter()


@router.get("", response_model=ApiResponse[NotificationListPayload], summary="List own notifications")
async def list_notifications(
    type: Optional[NotificationType] = None,
    is_read: Optional[bool] = Query(default=None, alias="isRead"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    current: Account = Depends(get_current_account),
    service: NotificationService = Depends(get_notification_service),
):
    result = await service.list_notifications(
        NotificationQuery(
            recipient_id=current.id,
            type=type,
            is_read=is_read,
            skip=(page - 1) * limit,
            limit=limit,
        )
    )
    return ApiResponse(
        data=NotificationListPayload(
            notifications=[NotificationOut.model_validate(item) for item in result.notifications],
            pagination=NotificationPagination(
                current_page=page,
                total_pages=(result.total + limit - 1) // limit,
                total_notifications=result.total,
                has_next_page=page * limit < result.total,
                has_prev_page=page > 1,
            ),
            unread_count=result.unread_count,
        )
    )


@router.get("/stats", response_model=ApiResponse[NotificationStatsOut], summary="Notification counters")
async def notification_stats(
    current: Account = Depends(get_current_account),
    service: NotificationService = Depends(get_notification_service),
):
    return ApiResponse(data=NotificationStatsOut.model_validate(await service.stats(current.id)))


@router.put("/mark-all-read", response_model=ApiResponse[ModifiedCount], summary="Mark every notification read")
async def mark_all_read(
    current: Account = Depends(get_current_account),
    service: NotificationService = Depends(get_notification_service),
):
    modified = await service.mark_all_read(current.id)
    return ApiResponse(
        message=f"{modified} notifications marked as read",
        data=ModifiedCount(modified_count=modified),
    )


@router.delete("/clear-read", response_model=ApiResponse[DeletedCount], summary="Delete read notifications")
async def clear_read(
    current: Account = Depends(get_current_account),
    service: NotificationService = Depends(get_notification_service),
):
    deleted = await service.clear_read(current.id)
    return ApiResponse(
        message=f"{deleted} read notifications cleared",
        data=DeletedCount(deleted_count=deleted),
    )


@router.put("/{notification_id}/read", response_model=ApiResponse[NotificationPayload], summary="Mark one read")
async def mark_read(
    notification_id: str,
    current: Account = Depends(get_current_account),
    service: NotificationService = Depends(get_notification_service),
):
    try:
        notification = await service.mark_read(notification_id, recipient_id=current.id)
    except NotificationNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found") from exc
    except NotificationAccessDeniedError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to access this notification",
        ) from exc
    return ApiResponse(
        message="Notification marked as read",
        data=NotificationPayload(notification=NotificationOut.model_validate(notification)),
    )


@router.delete("/{notification_id}", response_model=ApiResponse, summary="Delete one notification")
async def delete_notification(
    notification_id: str,
    current: Account = Depends(get_current_account),
    service: NotificationService = Depends(get_notification_service),
):
    try:
        await service.delete_notification(notification_id, recipient_id=current.id)
    except NotificationNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found") from exc
    except NotificationAccessDeniedError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to delete this notification",
        ) from exc
    return ApiResponse(message="Notification deleted successfully")


@router.post(
    "",
    response_model=ApiResponse[NotificationPayload],
    status_code=status.HTTP_201_CREATED,
    summary="Send a notification",
)
async def create_notification(
    payload: NotificationCreate,
    admin: Account = Depends(get_current_admin),
    service: NotificationService = Depends(get_notification_service),
):
    try:
        notification = await service.create_notification(
            NotificationCreateInput(
                recipient_id=payload.recipient,
                title=payload.title,
                message=payload.message,
                type=payload.type,
                priority=payload.priority,
                related_ticket_id=payload.related_ticket,
                action_url=payload.action_url,
                metadata=payload.metadata,
            )
        )
    except InvalidRecipientError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Recipient not found") from exc
    return ApiResponse(
        message="Notification created successfully",
        data=NotificationPayload(notification=NotificationOut.model_validate(notification)),
    )
