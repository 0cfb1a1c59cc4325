# backend/mentorhub/services/payment_service.py
"""
Payment Service for MentorHub

Payment intents are created by the external processor. This service
records the processor reference against a pending session and applies the
outcome the processor reports back: a successful payment confirms the
session, a failed or cancelled one marks its payment rejected.

Callbacks may be delivered more than once; a repeated outcome is a no-op.
"""

import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from ..core.enums import ActionType, ResourceType
from ..core.exceptions import (
    ConflictException,
    DomainException,
    ForbiddenException,
    NotFoundException,
    RepositoryException,
    RepositoryIntegrityError,
    ServiceException,
)
from ..core.rbac import AccessContext
from ..models.booking import Booking, PaymentStatus, SessionStatus
from ..models.notification import NotificationType
from ..models.payment import Payment, PaymentRecordStatus
from ..repositories.factory import RepositoryFactory
from ..schemas.payment import PaymentCallback, PaymentCreate
from ..schemas.registry import validate_or_raise
from ..utils.time_helpers import utc_now
from .base import BaseService
from .mentor_stats_service import MentorStatsService
from .notification_service import NotificationEvent, NotificationService
from .permission_service import PermissionChecker, permission_checker
from .session_lifecycle import SessionEvent, SessionLifecycle

logger = logging.getLogger(__name__)

_OUTCOME_STATUS = {
    "succeeded": PaymentRecordStatus.COMPLETED.value,
    "failed": PaymentRecordStatus.FAILED.value,
    "cancelled": PaymentRecordStatus.FAILED.value,
}


class PaymentService(BaseService):
    def __init__(
        self,
        db: Session,
        *,
        checker: Optional[PermissionChecker] = None,
        notification_service: Optional[NotificationService] = None,
    ):
        super().__init__(db)
        self.checker = checker or permission_checker
        self.repository = RepositoryFactory.create_payment_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.lifecycle = SessionLifecycle(db, self.booking_repository, self.checker)
        self.notifications = notification_service or NotificationService(db)
        self.mentor_stats = MentorStatsService(db)

    @BaseService.measure_operation("register_payment")
    def register_payment(self, ctx: AccessContext, payload: Any) -> Payment:
        """
        Record a processor payment intent for the caller's pending session.

        Raises:
            ForbiddenException: caller may not pay, or the session is not theirs
            NotFoundException: session does not exist
            ConflictException: session already paid, not pending, or reference already used
        """
        if not self.checker.can_perform(ctx, ActionType.CREATE, ResourceType.PAYMENT):
            raise ForbiddenException("You don't have permission to make payments")
        data = validate_or_raise("payment-create", payload, PaymentCreate)

        booking = self.booking_repository.get_by_id(data.session_id)
        if booking is None:
            raise NotFoundException("Session not found")
        if booking.student_id != ctx.user_id:
            raise ForbiddenException("You can only pay for your own sessions")
        if booking.payment_status == PaymentStatus.VERIFIED.value:
            raise ConflictException("This session is already paid", code="SESSION_ALREADY_PAID")
        if booking.status != SessionStatus.PENDING.value:
            raise ConflictException(
                f"Cannot pay for a session that is {booking.status}", code="SESSION_NOT_PAYABLE"
            )

        try:
            with self.transaction():
                payment = self.repository.create(
                    session_id=booking.id,
                    student_id=booking.student_id,
                    mentor_id=booking.mentor_id,
                    amount=booking.amount,
                    currency=booking.currency,
                    payment_method=data.payment_method,
                    external_reference=data.external_reference,
                    status=PaymentRecordStatus.PENDING.value,
                )
        except RepositoryIntegrityError as exc:
            raise ConflictException(
                "Payment reference already registered", code="DUPLICATE_PAYMENT_REFERENCE"
            ) from exc
        except RepositoryException as exc:
            self.logger.exception(f"Failed to register payment for session {booking.id}")
            raise ServiceException("Failed to register payment") from exc

        self.log_operation(
            "register_payment",
            payment_id=payment.id,
            session_id=booking.id,
            amount=str(payment.amount),
        )
        return payment

    @BaseService.measure_operation("handle_payment_callback")
    def handle_payment_callback(self, payload: Any) -> Payment:
        """
        Apply a processor outcome to the payment and its session.

        Raises:
            NotFoundException: unknown payment reference
            ConflictException: payment already settled with a different outcome
            InvalidStateTransitionException: session can no longer be confirmed
        """
        data = validate_or_raise("payment-callback", payload, PaymentCallback)
        payment = self.repository.get_by_external_reference(data.external_reference)
        if payment is None:
            raise NotFoundException("Payment not found")

        target_status = _OUTCOME_STATUS[data.status]
        if payment.status != PaymentRecordStatus.PENDING.value:
            if payment.status == target_status:
                self.logger.info(f"Ignoring replayed {data.status} callback for payment {payment.id}")
                return payment
            raise ConflictException(
                f"Payment is already {payment.status}", code="PAYMENT_ALREADY_PROCESSED"
            )

        booking = self.booking_repository.get_by_id(payment.session_id)
        if booking is None:
            raise NotFoundException("Session not found")

        try:
            with self.transaction():
                self.repository.update(
                    payment,
                    status=target_status,
                    failure_reason=data.failure_reason,
                    processed_at=utc_now(),
                )
                if target_status == PaymentRecordStatus.COMPLETED.value:
                    self.lifecycle.apply(booking, SessionEvent.PAYMENT_VERIFIED)
                elif booking.status == SessionStatus.PENDING.value:
                    self.lifecycle.apply(booking, SessionEvent.PAYMENT_FAILED)
        except DomainException:
            raise
        except RepositoryException as exc:
            self.logger.exception(f"Failed to apply payment callback for {payment.id}")
            raise ServiceException("Failed to process payment callback") from exc

        self.log_operation(
            "payment_callback",
            payment_id=payment.id,
            session_id=booking.id,
            outcome=data.status,
        )

        if target_status == PaymentRecordStatus.COMPLETED.value:
            self._on_payment_succeeded(payment, booking)
        else:
            self._on_payment_failed(payment, booking)
        return payment

    def _on_payment_succeeded(self, payment: Payment, booking: Booking) -> None:
        self.mentor_stats.record_earnings(payment.mentor_id, payment.amount)
        self.notifications.emit_many(
            [
                NotificationEvent(
                    user_id=payment.student_id,
                    type=NotificationType.PAYMENT,
                    title="Payment Successful",
                    message=f"Your payment of {payment.amount} {payment.currency} was received",
                    data={"payment_id": payment.id, "session_id": booking.id},
                ),
                NotificationEvent(
                    user_id=payment.mentor_id,
                    type=NotificationType.SESSION,
                    title="Session Confirmed",
                    message=(
                        f"Your session on {booking.session_date} at {booking.session_time} "
                        "is confirmed"
                    ),
                    data={"session_id": booking.id},
                ),
            ]
        )

    def _on_payment_failed(self, payment: Payment, booking: Booking) -> None:
        self.notifications.emit(
            NotificationEvent(
                user_id=payment.student_id,
                type=NotificationType.PAYMENT,
                title="Payment Failed",
                message=payment.failure_reason or "Your payment could not be processed",
                data={"payment_id": payment.id, "session_id": booking.id},
            )
        )
