# backend/mentorhub/models/notification.py
from enum import Enum

from sqlalchemy import JSON, Boolean, CheckConstraint, Column, DateTime, ForeignKey, Index, String, Text
import ulid

from ..database import Base
from ..utils.time_helpers import utc_now


class NotificationType(str, Enum):
    BOOKING = "booking"
    PAYMENT = "payment"
    SESSION = "session"
    REVIEW = "review"


class Notification(Base):
    """In-app notification; delivery to push/email happens out of band."""

    __tablename__ = "notifications"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_id = Column(String(26), ForeignKey("users.id"), nullable=False)
    type = Column(String(20), nullable=False)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    data = Column(JSON, nullable=False, default=dict)
    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime(timezone=True), nullable=True)
    delivered_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    __table_args__ = (
        CheckConstraint(
            "type IN ('booking', 'payment', 'session', 'review')",
            name="ck_notifications_type",
        ),
        Index("idx_notifications_user_created", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Notification {self.id}: user={self.user_id} type={self.type}>"
