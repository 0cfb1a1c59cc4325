# backend/mentorhub/dependencies/services.py
"""
Service layer dependencies.

One service instance per request, bound to the request's session.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..services.availability_service import AvailabilityService
from ..services.booking_service import BookingService
from ..services.notification_service import NotificationService
from ..services.payment_service import PaymentService
from ..services.review_service import ReviewService


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    return BookingService(db)


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    return AvailabilityService(db)


def get_review_service(db: Session = Depends(get_db)) -> ReviewService:
    return ReviewService(db)


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    return NotificationService(db)


def get_payment_service(db: Session = Depends(get_db)) -> PaymentService:
    return PaymentService(db)


__all__ = [
    "get_availability_service",
    "get_booking_service",
    "get_db",
    "get_notification_service",
    "get_payment_service",
    "get_review_service",
]
