# backend/mentorhub/services/notification_service.py
"""
Notification emission and the per-user inbox.

Notifications are side effects: they are persisted in their own transaction
after the triggering change has committed and then queued for delivery.
Emission never raises into the caller; failures are logged and counted.

The inbox operations only ever touch the caller's own notifications.
"""

from dataclasses import asdict, dataclass, field
import logging
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import NotFoundException, RepositoryException, ServiceException, ValidationException
from ..core.rbac import AccessContext
from ..models.notification import Notification, NotificationType
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..utils.time_helpers import utc_now
from .base import BaseService

logger = logging.getLogger(__name__)

Dispatcher = Callable[[str], None]

NOTIFICATION_TYPES = frozenset(t.value for t in NotificationType)
INBOX_PAGE_SIZE = 20


@dataclass(frozen=True)
class NotificationEvent:
    user_id: str
    type: NotificationType
    title: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["type"] = self.type.value
        return payload


@dataclass(frozen=True)
class NotificationPage:
    items: List[Notification]
    total: int
    unread_count: int
    offset: int
    limit: int


def enqueue_delivery(notification_id: str) -> None:
    """Queue the Celery delivery task."""
    from ..tasks.notification_tasks import deliver_notification

    deliver_notification.apply_async((notification_id,), queue=settings.notification_queue, retry=False)


class NotificationService(BaseService):
    def __init__(self, db: Session, dispatcher: Optional[Dispatcher] = None):
        super().__init__(db)
        self.repository = RepositoryFactory.create_notification_repository(db)
        if dispatcher is not None:
            self.dispatcher: Optional[Dispatcher] = dispatcher
        elif settings.notifications_async_dispatch:
            self.dispatcher = enqueue_delivery
        else:
            self.dispatcher = None

    def emit(self, event: NotificationEvent) -> Optional[Notification]:
        """Persist and queue one notification. Returns None on failure."""
        try:
            with self.transaction():
                notification = self.repository.create(
                    user_id=event.user_id,
                    type=event.type.value,
                    title=event.title,
                    message=event.message,
                    data=event.data,
                )
        except Exception as exc:
            prometheus_metrics.record_notification("emit", "error", event.type.value)
            self.logger.error(
                "Failed to persist notification",
                extra={"user_id": event.user_id, "title": event.title, "error": str(exc)},
            )
            return None

        prometheus_metrics.record_notification("emit", "success", event.type.value)

        if self.dispatcher is not None:
            try:
                self.dispatcher(notification.id)
            except Exception as exc:
                prometheus_metrics.record_notification("enqueue", "error", event.type.value)
                self.logger.warning(
                    "Failed to queue notification delivery",
                    extra={"notification_id": notification.id, "error": str(exc)},
                )
        return notification

    def emit_many(self, events: List[NotificationEvent]) -> None:
        for event in events:
            self.emit(event)

    @BaseService.measure_operation("list_notifications")
    def list_notifications(
        self,
        ctx: AccessContext,
        *,
        unread_only: bool = False,
        type: Optional[str] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> NotificationPage:
        """The caller's inbox, newest first."""
        if type is not None and type not in NOTIFICATION_TYPES:
            raise ValidationException.for_field(
                "type", f"Must be one of: {', '.join(sorted(NOTIFICATION_TYPES))}"
            )
        offset = max(offset, 0)
        limit = min(max(limit or INBOX_PAGE_SIZE, 1), settings.max_page_size)
        try:
            items, total = self.repository.list_for_user(
                ctx.user_id, unread_only=unread_only, type=type, offset=offset, limit=limit
            )
            unread = self.repository.unread_count(ctx.user_id)
        except RepositoryException as exc:
            self.logger.exception(f"Failed to list notifications for {ctx.user_id}")
            raise ServiceException("Failed to list notifications") from exc
        return NotificationPage(items=items, total=total, unread_count=unread, offset=offset, limit=limit)

    @BaseService.measure_operation("mark_notification_read")
    def mark_read(self, ctx: AccessContext, notification_id: str) -> Notification:
        notification = self._get_own(ctx, notification_id)
        if notification.is_read:
            return notification
        try:
            with self.transaction():
                self.repository.update(notification, is_read=True, read_at=utc_now())
        except RepositoryException as exc:
            self.logger.exception(f"Failed to mark notification {notification_id} read")
            raise ServiceException("Failed to update notification") from exc
        return notification

    @BaseService.measure_operation("mark_all_notifications_read")
    def mark_all_read(self, ctx: AccessContext) -> int:
        try:
            with self.transaction():
                count = self.repository.mark_all_read(ctx.user_id, utc_now())
        except RepositoryException as exc:
            self.logger.exception(f"Failed to mark notifications read for {ctx.user_id}")
            raise ServiceException("Failed to update notifications") from exc
        self.log_operation("mark_all_notifications_read", user_id=ctx.user_id, count=count)
        return count

    @BaseService.measure_operation("delete_notification")
    def delete_notification(self, ctx: AccessContext, notification_id: str) -> None:
        notification = self._get_own(ctx, notification_id)
        try:
            with self.transaction():
                self.repository.delete(notification)
        except RepositoryException as exc:
            self.logger.exception(f"Failed to delete notification {notification_id}")
            raise ServiceException("Failed to delete notification") from exc

    def _get_own(self, ctx: AccessContext, notification_id: str) -> Notification:
        # Other users' notifications are indistinguishable from missing ones.
        notification = self.repository.get_for_user(notification_id, ctx.user_id)
        if notification is None:
            raise NotFoundException("Notification not found")
        return notification
