# backend/mentorhub/routes/notifications.py
"""
Notification inbox routes. Every endpoint acts on the caller's own inbox.

Router Endpoints:
    GET / - List notifications (limit, offset, unread_only, type)
    PATCH /{notification_id} - Mark one notification read
    POST /mark-all-read - Mark every unread notification read
    DELETE /{notification_id} - Delete a notification
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query

from ..core.exceptions import DomainException
from ..core.rbac import AccessContext
from ..dependencies.auth import get_access_context
from ..dependencies.services import get_notification_service
from ..schemas.base_responses import DeleteResponse
from ..schemas.notification import MarkAllReadResponse, NotificationListResponse, NotificationResponse
from ..services.notification_service import NotificationService
from . import handle_domain_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    limit: Optional[int] = Query(None, ge=1, le=100),
    offset: int = Query(0, ge=0),
    unread_only: bool = Query(False),
    type: Optional[str] = Query(None),
    ctx: AccessContext = Depends(get_access_context),
    notification_service: NotificationService = Depends(get_notification_service),
) -> NotificationListResponse:
    try:
        result = notification_service.list_notifications(
            ctx, unread_only=unread_only, type=type, offset=offset, limit=limit
        )
    except DomainException as e:
        handle_domain_exception(e)
    return NotificationListResponse(
        items=[NotificationResponse.model_validate(n) for n in result.items],
        total=result.total,
        unread_count=result.unread_count,
        offset=result.offset,
        limit=result.limit,
    )


@router.post("/mark-all-read", response_model=MarkAllReadResponse)
def mark_all_read(
    ctx: AccessContext = Depends(get_access_context),
    notification_service: NotificationService = Depends(get_notification_service),
) -> MarkAllReadResponse:
    try:
        count = notification_service.mark_all_read(ctx)
    except DomainException as e:
        handle_domain_exception(e)
    return MarkAllReadResponse(message=f"Marked {count} notifications as read", count=count)


@router.patch("/{notification_id}", response_model=NotificationResponse)
def mark_read(
    notification_id: str = Path(..., min_length=1),
    ctx: AccessContext = Depends(get_access_context),
    notification_service: NotificationService = Depends(get_notification_service),
) -> NotificationResponse:
    try:
        return NotificationResponse.model_validate(notification_service.mark_read(ctx, notification_id))
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{notification_id}", response_model=DeleteResponse)
def delete_notification(
    notification_id: str = Path(..., min_length=1),
    ctx: AccessContext = Depends(get_access_context),
    notification_service: NotificationService = Depends(get_notification_service),
) -> DeleteResponse:
    try:
        notification_service.delete_notification(ctx, notification_id)
    except DomainException as e:
        handle_domain_exception(e)
    return DeleteResponse(message="Notification deleted")
