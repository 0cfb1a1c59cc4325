# backend/mentorhub/services/notification_provider.py
"""
Notification delivery providers.

Push and email delivery belong to external collaborators. A provider takes a
persisted notification and hands it to them; the default provider only logs.
"""

import logging
from typing import Protocol

from ..models.notification import Notification

logger = logging.getLogger(__name__)


class NotificationProviderTemporaryError(RuntimeError):
    """Transient provider failure; the delivery task retries."""


class NotificationProvider(Protocol):
    def send(self, notification: Notification) -> None:
        ...


class LoggingNotificationProvider:
    """Records the hand-off in the application log."""

    def send(self, notification: Notification) -> None:
        logger.info(
            "notification_delivered",
            extra={
                "notification_id": notification.id,
                "user_id": notification.user_id,
                "notification_type": notification.type,
                "title": notification.title,
            },
        )


def get_notification_provider() -> NotificationProvider:
    return LoggingNotificationProvider()
