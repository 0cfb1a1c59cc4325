# backend/mentorhub/models/__init__.py
"""
Database models for the MentorHub platform.

Importing this package registers every table on ``Base.metadata``.
"""

from .availability import AvailabilityException, AvailabilityRule, ExceptionType
from .booking import (
    ACTIVE_STATUSES,
    Booking,
    PaymentStatus,
    SessionDuration,
    SessionStatus,
    SessionType,
)
from .mentor_profile import MentorProfile
from .notification import Notification, NotificationType
from .payment import Payment, PaymentRecordStatus
from .review import Review
from .user import User

__all__ = [
    "ACTIVE_STATUSES",
    "AvailabilityException",
    "AvailabilityRule",
    "Booking",
    "ExceptionType",
    "MentorProfile",
    "Notification",
    "NotificationType",
    "Payment",
    "PaymentRecordStatus",
    "PaymentStatus",
    "Review",
    "SessionDuration",
    "SessionStatus",
    "SessionType",
    "User",
]
