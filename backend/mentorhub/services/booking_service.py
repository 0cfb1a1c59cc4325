# backend/mentorhub/services/booking_service.py
"""
Booking Service for MentorHub

Orchestrates booking operations: authorization, payload validation, mentor
eligibility, slot conflict checks, pricing, persistence, and the
notification and counter side effects.

This is the layer that turns negative answers from the permission checker
and the conflict checker into domain exceptions, and the only layer that
logs unexpected failures.

Slot reservation is serialized per mentor three ways: a Redis lock around
check-and-insert, a row lock on the mentor inside the transaction, and a
partial unique index on active sessions.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
import logging
import math
from typing import Any, Callable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.booking_lock import mentor_booking_lock
from ..core.config import settings
from ..core.enums import PermissionName, RoleName
from ..core.exceptions import (
    BookingConflictException,
    DomainException,
    ForbiddenException,
    NotFoundException,
    RepositoryException,
    RepositoryIntegrityError,
    ServiceException,
    ValidationException,
)
from ..core.rbac import AccessContext
from ..models.booking import Booking, SessionStatus
from ..models.mentor_profile import MentorProfile
from ..models.notification import NotificationType
from ..models.user import User
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..schemas.booking import BookingCancel, BookingCreate, BookingReschedule
from ..schemas.registry import validate_or_raise
from ..utils.time_helpers import utc_today
from .base import BaseService
from .conflict_checker import ALREADY_BOOKED_REASON, ConflictChecker
from .mentor_stats_service import MentorStatsService
from .notification_service import NotificationEvent, NotificationService
from .permission_service import PermissionChecker, permission_checker
from .pricing_service import price
from .session_lifecycle import SessionEvent, SessionLifecycle

logger = logging.getLogger(__name__)

LOCK_BUSY_REASON = "Another booking for this mentor is in progress, please try again"
DEFAULT_STUDENT_NAME = "A student"


@dataclass(frozen=True)
class BookingResult:
    session: Booking
    amount: Decimal


@dataclass(frozen=True)
class BookingPage:
    """One page of sessions with the counterparty's (name, email)."""

    items: List[Tuple[Booking, str, str]]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


class BookingService(BaseService):
    """Service layer for session booking operations."""

    def __init__(
        self,
        db: Session,
        *,
        checker: Optional[PermissionChecker] = None,
        conflict_checker: Optional[ConflictChecker] = None,
        notification_service: Optional[NotificationService] = None,
        today_provider: Callable[[], date] = utc_today,
    ):
        super().__init__(db)
        self.checker = checker or permission_checker
        self.repository = RepositoryFactory.create_booking_repository(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.mentor_profile_repository = RepositoryFactory.create_mentor_profile_repository(db)
        self.conflict_checker = conflict_checker or ConflictChecker(db)
        self.lifecycle = SessionLifecycle(db, self.repository, self.checker)
        self.notifications = notification_service or NotificationService(db)
        self.mentor_stats = MentorStatsService(db)
        self._today = today_provider

    # Creation

    @BaseService.measure_operation("create_booking")
    def create_booking(self, ctx: AccessContext, payload: Any) -> BookingResult:
        """
        Book a session for the calling student.

        Args:
            ctx: Caller's access context
            payload: Raw ``booking-create`` payload (or a BookingCreate)

        Returns:
            BookingResult with the pending session and its amount

        Raises:
            ForbiddenException: caller may not book sessions
            ValidationException: payload invalid or date in the past
            NotFoundException: mentor not bookable or has no pricing profile
            BookingConflictException: slot not free (reason is user-facing)
            ServiceException: unexpected persistence failure
        """
        if not self.checker.has_permission(ctx, PermissionName.BOOK_SESSION):
            raise ForbiddenException("You don't have permission to book sessions")

        data = validate_or_raise("booking-create", payload, BookingCreate)
        self._ensure_not_in_past(data.session_date)

        mentor = self._get_bookable_mentor(data.mentor_id)
        profile = self.mentor_profile_repository.get_by_user_id(mentor.id)
        if profile is None:
            raise NotFoundException("Mentor profile not found")

        try:
            with mentor_booking_lock(mentor.id) as acquired:
                if not acquired:
                    raise BookingConflictException(LOCK_BUSY_REASON)
                booking = self._reserve_slot(ctx, data, profile)
        except BookingConflictException as exc:
            prometheus_metrics.record_booking_outcome("conflict")
            self.logger.info(
                f"Booking conflict for mentor {mentor.id} on {data.session_date} "
                f"{data.session_time}: {exc.reason}"
            )
            raise
        except DomainException:
            raise
        except (RepositoryException, SQLAlchemyError) as exc:
            self.logger.exception(f"Failed to create booking with mentor {mentor.id}")
            raise ServiceException("Failed to create booking") from exc

        prometheus_metrics.record_booking_outcome("created")
        self.log_operation(
            "create_booking",
            session_id=booking.id,
            student_id=ctx.user_id,
            mentor_id=mentor.id,
        )

        self.mentor_stats.record_session_booked(mentor.id)
        student_name = self._student_name(ctx.user_id)
        self.notifications.emit(
            NotificationEvent(
                user_id=mentor.id,
                type=NotificationType.BOOKING,
                title="New Session Booking",
                message=(
                    f"{student_name} has booked a session for {booking.session_date} "
                    f"at {booking.session_time}"
                ),
                data={"session_id": booking.id, "student_id": ctx.user_id},
            )
        )
        return BookingResult(session=booking, amount=booking.amount)

    def _student_name(self, student_id: str) -> str:
        """Display name for notifications; never fails the calling operation."""
        try:
            student = self.user_repository.get_by_id(student_id)
        except RepositoryException as exc:
            self.db.rollback()
            self.logger.warning(
                "Failed to load student for notification",
                extra={"student_id": student_id, "error": str(exc)},
            )
            return DEFAULT_STUDENT_NAME
        return student.name if student is not None else DEFAULT_STUDENT_NAME

    def _reserve_slot(
        self, ctx: AccessContext, data: BookingCreate, profile: MentorProfile
    ) -> Booking:
        with self.transaction():
            self.user_repository.lock_for_update(data.mentor_id)

            check = self.conflict_checker.is_slot_free(
                data.mentor_id, data.session_date, data.session_time, data.duration.value
            )
            if not check.free:
                raise BookingConflictException(check.reason, details=check.details)

            amount = price(profile.hourly_rate, data.duration)
            try:
                return self.repository.create(
                    student_id=ctx.user_id,
                    mentor_id=data.mentor_id,
                    session_date=data.session_date,
                    session_time=data.session_time,
                    duration=data.duration.value,
                    subject=data.subject,
                    session_type=data.session_type.value,
                    message=data.message,
                    status=SessionStatus.PENDING.value,
                    amount=amount,
                    currency=profile.currency or settings.default_currency,
                )
            except RepositoryIntegrityError as exc:
                raise BookingConflictException(ALREADY_BOOKED_REASON) from exc

    # Queries

    @BaseService.measure_operation("list_bookings")
    def list_bookings(
        self,
        ctx: AccessContext,
        status: Optional[str] = None,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> BookingPage:
        """
        Sessions visible to the caller, newest first.

        Students see their own bookings (with the mentor's details), mentors
        see sessions booked with them and admins see everything (both with
        the student's details).
        """
        if status is not None and status not in {s.value for s in SessionStatus}:
            raise ValidationException.for_field("status", f"Unknown status '{status}'")
        page = max(page, 1)
        limit = min(max(limit or settings.default_page_size, 1), settings.max_page_size)

        if ctx.role == RoleName.STUDENT:
            self._require(ctx, PermissionName.VIEW_OWN_SESSIONS)
            filters = {"student_id": ctx.user_id, "counterparty": "mentor"}
        elif ctx.role == RoleName.MENTOR:
            self._require(ctx, PermissionName.VIEW_OWN_SESSIONS)
            filters = {"mentor_id": ctx.user_id, "counterparty": "student"}
        else:
            self._require(ctx, PermissionName.VIEW_ALL_SESSIONS)
            filters = {"counterparty": "student"}

        try:
            rows, total = self.repository.list_with_counterparty(
                status=status, offset=(page - 1) * limit, limit=limit, **filters
            )
        except RepositoryException as exc:
            self.logger.exception("Failed to list bookings")
            raise ServiceException("Failed to list bookings") from exc
        return BookingPage(items=rows, total=total, page=page, limit=limit)

    @BaseService.measure_operation("get_booking")
    def get_booking(self, ctx: AccessContext, session_id: str) -> Booking:
        """Participants and admins only; anyone else gets NotFound."""
        booking = self.repository.get_by_id(session_id)
        if booking is None or not self._can_see(ctx, booking):
            raise NotFoundException("Session not found")
        return booking

    # Lifecycle

    @BaseService.measure_operation("cancel_booking")
    def cancel_booking(self, ctx: AccessContext, session_id: str, payload: Any = None) -> Booking:
        data = validate_or_raise("booking-cancel", payload or {}, BookingCancel)
        booking = self.get_booking(ctx, session_id)
        if not self.lifecycle.can_cancel(ctx, booking):
            raise ForbiddenException("You don't have permission to cancel this session")

        changed = self._apply(
            booking,
            SessionEvent.CANCEL,
            cancelled_by_id=ctx.user_id,
            reason=data.reason,
        )
        if changed:
            self._notify_counterparty(
                ctx,
                booking,
                title="Session Cancelled",
                message=f"Your session on {booking.session_date} at {booking.session_time} was cancelled",
            )
        return booking

    @BaseService.measure_operation("complete_booking")
    def complete_booking(self, ctx: AccessContext, session_id: str) -> Booking:
        booking = self.get_booking(ctx, session_id)
        if not self.lifecycle.can_complete(ctx, booking):
            raise ForbiddenException("Only the session's mentor can mark it completed")

        if self._apply(booking, SessionEvent.COMPLETE):
            self.notifications.emit(
                NotificationEvent(
                    user_id=booking.student_id,
                    type=NotificationType.SESSION,
                    title="Session Completed",
                    message="Your session has been marked as completed. Leave a review!",
                    data={"session_id": booking.id},
                )
            )
        return booking

    @BaseService.measure_operation("reschedule_booking")
    def reschedule_booking(self, ctx: AccessContext, session_id: str, payload: Any) -> Booking:
        """
        Move a pending/confirmed session to a new free slot.

        It returns to pending, or straight to confirmed when already paid.
        """
        booking = self.get_booking(ctx, session_id)
        if not self.lifecycle.can_reschedule(ctx, booking):
            raise ForbiddenException("You don't have permission to reschedule this session")

        data = validate_or_raise("booking-reschedule", payload, BookingReschedule)
        self._ensure_not_in_past(data.session_date)
        self.lifecycle.check(booking, SessionEvent.RESCHEDULE)

        try:
            with mentor_booking_lock(booking.mentor_id) as acquired:
                if not acquired:
                    raise BookingConflictException(LOCK_BUSY_REASON)
                with self.transaction():
                    self.user_repository.lock_for_update(booking.mentor_id)
                    check = self.conflict_checker.is_slot_free(
                        booking.mentor_id,
                        data.session_date,
                        data.session_time,
                        booking.duration,
                        exclude_session_id=booking.id,
                    )
                    if not check.free:
                        raise BookingConflictException(check.reason, details=check.details)
                    try:
                        self.lifecycle.apply(
                            booking,
                            SessionEvent.RESCHEDULE,
                            session_date=data.session_date,
                            session_time=data.session_time,
                            reason=data.reason,
                        )
                    except RepositoryIntegrityError as exc:
                        raise BookingConflictException(ALREADY_BOOKED_REASON) from exc
        except DomainException:
            raise
        except (RepositoryException, SQLAlchemyError) as exc:
            self.logger.exception(f"Failed to reschedule session {session_id}")
            raise ServiceException("Failed to reschedule session") from exc

        self._notify_counterparty(
            ctx,
            booking,
            title="Session Rescheduled",
            message=f"Your session was moved to {booking.session_date} at {booking.session_time}",
        )
        return booking

    @BaseService.measure_operation("delete_booking")
    def delete_booking(self, ctx: AccessContext, session_id: str) -> None:
        """Hard delete, for admins only. The lifecycle never deletes sessions."""
        if not self.checker.has_permission(ctx, PermissionName.MANAGE_SESSIONS):
            raise ForbiddenException("Only administrators can delete sessions")
        booking = self.repository.get_by_id(session_id)
        if booking is None:
            raise NotFoundException("Session not found")
        try:
            with self.transaction():
                self.repository.delete(booking)
        except RepositoryException as exc:
            self.logger.exception(f"Failed to delete session {session_id}")
            raise ServiceException("Failed to delete session") from exc
        self.log_operation("delete_booking", session_id=session_id, deleted_by=ctx.user_id)

    # Helpers

    def _apply(self, booking: Booking, event: SessionEvent, **values: Any) -> bool:
        try:
            with self.transaction():
                return self.lifecycle.apply(booking, event, **values)
        except DomainException:
            raise
        except RepositoryException as exc:
            self.logger.exception(f"Failed to apply {event.value} to session {booking.id}")
            raise ServiceException("Failed to update session") from exc

    def _require(self, ctx: AccessContext, permission: PermissionName) -> None:
        if not self.checker.has_permission(ctx, permission):
            raise ForbiddenException("You don't have permission to view these sessions")

    def _can_see(self, ctx: AccessContext, booking: Booking) -> bool:
        if self.checker.has_permission(ctx, PermissionName.VIEW_ALL_SESSIONS):
            return True
        return booking.involves(ctx.user_id) and self.checker.has_permission(
            ctx, PermissionName.VIEW_OWN_SESSIONS
        )

    def _ensure_not_in_past(self, session_date: date) -> None:
        if session_date < self._today():
            raise ValidationException.for_field("session_date", "Cannot book sessions in the past")

    def _get_bookable_mentor(self, mentor_id: str) -> User:
        mentor = self.user_repository.get_by_id(mentor_id)
        if mentor is None or not mentor.is_bookable_mentor:
            raise NotFoundException("Mentor not found")
        return mentor

    def _notify_counterparty(
        self, ctx: AccessContext, booking: Booking, title: str, message: str
    ) -> None:
        recipients = [uid for uid in (booking.student_id, booking.mentor_id) if uid != ctx.user_id]
        self.notifications.emit_many(
            [
                NotificationEvent(
                    user_id=user_id,
                    type=NotificationType.SESSION,
                    title=title,
                    message=message,
                    data={"session_id": booking.id, "status": booking.status},
                )
                for user_id in recipients
            ]
        )
