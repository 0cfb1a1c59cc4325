"""FastAPI dependencies: database session, caller identity, services."""

from .auth import get_access_context
from .permissions import require_permission
from .services import (
    get_availability_service,
    get_booking_service,
    get_db,
    get_notification_service,
    get_payment_service,
    get_review_service,
)

__all__ = [
    "get_access_context",
    "get_availability_service",
    "get_booking_service",
    "get_db",
    "get_notification_service",
    "get_payment_service",
    "get_review_service",
    "require_permission",
]
