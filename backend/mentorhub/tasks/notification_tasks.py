# backend/mentorhub/tasks/notification_tasks.py
"""
Celery task delivering persisted notifications to the provider.
"""

from contextlib import contextmanager
from typing import Any, Iterator, Optional

from celery.utils.log import get_task_logger
from sqlalchemy.orm import Session

from ..core.config import settings
from ..database import SessionLocal, get_engine
from ..models.notification import Notification
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..services.notification_provider import (
    NotificationProviderTemporaryError,
    get_notification_provider,
)
from ..utils.time_helpers import utc_now
from .celery_app import celery_app

logger = get_task_logger(__name__)

MAX_DELIVERY_ATTEMPTS = 5
BACKOFF_SECONDS = [30, 120, 600, 1800, 7200]


def _next_backoff(attempt_number: int) -> int:
    """Return backoff delay for the given attempt (1-indexed)."""
    index = max(0, min(attempt_number - 1, len(BACKOFF_SECONDS) - 1))
    return BACKOFF_SECONDS[index]


@contextmanager
def _session_scope() -> Iterator[Session]:
    """Provide transactional scope for use in tasks."""
    get_engine()
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def deliver(session: Session, notification_id: str) -> Optional[str]:
    """Hand one notification to the provider and stamp ``delivered_at``."""
    notification = session.get(Notification, notification_id)
    if notification is None:
        logger.warning("Notification %s not found; skipping delivery", notification_id)
        return None
    if notification.delivered_at is not None:
        return notification.id

    get_notification_provider().send(notification)
    notification.delivered_at = utc_now()
    prometheus_metrics.record_notification("deliver", "success", notification.type)
    return notification.id


@celery_app.task(
    name="notifications.deliver",
    bind=True,
    max_retries=MAX_DELIVERY_ATTEMPTS,
    queue=settings.notification_queue,
)
def deliver_notification(self: Any, notification_id: str) -> Optional[str]:
    try:
        with _session_scope() as session:
            return deliver(session, notification_id)
    except NotificationProviderTemporaryError as exc:
        attempt = self.request.retries + 1
        logger.warning(
            "Delivery of notification %s failed (attempt %s): %s", notification_id, attempt, exc
        )
        raise self.retry(exc=exc, countdown=_next_backoff(attempt))
