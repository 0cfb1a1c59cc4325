# backend/mentorhub/repositories/notification_repository.py
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.notification import Notification
from .base_repository import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    def __init__(self, db: Session):
        super().__init__(db, Notification)

    def get_for_user(self, notification_id: str, user_id: str) -> Optional[Notification]:
        return self.find_one_by(id=notification_id, user_id=user_id)

    def list_for_user(
        self,
        user_id: str,
        *,
        unread_only: bool = False,
        type: Optional[str] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Tuple[List[Notification], int]:
        """Newest first. Returns the page and the filtered total."""
        try:
            query = self.db.query(Notification).filter(Notification.user_id == user_id)
            if unread_only:
                query = query.filter(Notification.is_read.is_(False))
            if type is not None:
                query = query.filter(Notification.type == type)
            total = query.count()
            items = (
                query.order_by(Notification.created_at.desc(), Notification.id.desc())
                .offset(offset)
                .limit(limit)
                .all()
            )
            return items, total
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing notifications for {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to list notifications: {str(e)}")

    def unread_count(self, user_id: str) -> int:
        try:
            return (
                self.db.query(Notification)
                .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
                .count()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting unread notifications for {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to count notifications: {str(e)}")

    def mark_all_read(self, user_id: str, read_at: datetime) -> int:
        """Flag every unread notification of the user; returns how many changed."""
        try:
            count = (
                self.db.query(Notification)
                .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
                .update({"is_read": True, "read_at": read_at}, synchronize_session=False)
            )
            self.db.flush()
            return count
        except SQLAlchemyError as e:
            self.logger.error(f"Error marking notifications read for {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to mark notifications read: {str(e)}")
