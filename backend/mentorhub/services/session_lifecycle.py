# backend/mentorhub/services/session_lifecycle.py
"""
Session lifecycle state machine.

    pending --payment verified--> confirmed --complete--> completed
    pending --payment failed----> pending (payment_status = rejected)
    pending/confirmed --cancel--> cancelled
    pending/confirmed --reschedule--> rescheduled --> pending
                                      (confirmed when payment is verified)

Every write is a conditional UPDATE guarded by the expected current status,
so two racing writers cannot both apply a transition. Replaying an event
whose effect is already in place is a no-op; any other event outside the
table raises ``InvalidStateTransitionException``.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
import logging
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Optional

from sqlalchemy.orm import Session

from ..core.enums import PermissionName
from ..core.exceptions import InvalidStateTransitionException
from ..core.rbac import AccessContext
from ..models.booking import Booking, PaymentStatus, SessionStatus
from ..repositories.booking_repository import BookingRepository
from ..repositories.factory import RepositoryFactory
from ..utils.time_helpers import utc_now
from .base import BaseService
from .permission_service import PermissionChecker, permission_checker

logger = logging.getLogger(__name__)

S = SessionStatus


class SessionEvent(str, Enum):
    PAYMENT_VERIFIED = "payment_verified"
    PAYMENT_FAILED = "payment_failed"
    CANCEL = "cancel"
    COMPLETE = "complete"
    RESCHEDULE = "reschedule"


@dataclass(frozen=True)
class Transition:
    from_statuses: FrozenSet[str]
    to_status: str


TRANSITIONS: Mapping[SessionEvent, Transition] = MappingProxyType(
    {
        SessionEvent.PAYMENT_VERIFIED: Transition(frozenset({S.PENDING.value}), S.CONFIRMED.value),
        SessionEvent.PAYMENT_FAILED: Transition(frozenset({S.PENDING.value}), S.PENDING.value),
        SessionEvent.CANCEL: Transition(
            frozenset({S.PENDING.value, S.CONFIRMED.value}), S.CANCELLED.value
        ),
        SessionEvent.COMPLETE: Transition(frozenset({S.CONFIRMED.value}), S.COMPLETED.value),
        SessionEvent.RESCHEDULE: Transition(
            frozenset({S.PENDING.value, S.CONFIRMED.value}), S.RESCHEDULED.value
        ),
    }
)


def is_replay(booking: Booking, event: SessionEvent) -> bool:
    """True when the event's effect is already in place."""
    if event == SessionEvent.PAYMENT_VERIFIED:
        return (
            booking.status == S.CONFIRMED.value
            and booking.payment_status == PaymentStatus.VERIFIED.value
        )
    if event == SessionEvent.CANCEL:
        return booking.status == S.CANCELLED.value
    if event == SessionEvent.COMPLETE:
        return booking.status == S.COMPLETED.value
    return False


class SessionLifecycle(BaseService):
    """Guarded status transitions for sessions."""

    def __init__(
        self,
        db: Session,
        repository: Optional[BookingRepository] = None,
        checker: Optional[PermissionChecker] = None,
    ):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_booking_repository(db)
        self.checker = checker or permission_checker

    # Actor guards. These answer yes/no; the caller raises.

    def can_cancel(self, ctx: AccessContext, booking: Booking) -> bool:
        if ctx.is_admin:
            return self.checker.has_any_permission(
                ctx, PermissionName.MANAGE_SESSIONS, PermissionName.CANCEL_SESSION
            )
        return booking.involves(ctx.user_id) and self.checker.has_permission(
            ctx, PermissionName.CANCEL_SESSION
        )

    def can_complete(self, ctx: AccessContext, booking: Booking) -> bool:
        if ctx.is_admin:
            return self.checker.has_permission(ctx, PermissionName.MANAGE_SESSIONS)
        return ctx.user_id == booking.mentor_id and self.checker.has_permission(
            ctx, PermissionName.MANAGE_STUDENT_SESSIONS
        )

    def can_reschedule(self, ctx: AccessContext, booking: Booking) -> bool:
        if ctx.is_admin:
            return self.checker.has_permission(ctx, PermissionName.MANAGE_SESSIONS)
        return booking.involves(ctx.user_id) and self.checker.has_permission(
            ctx, PermissionName.RESCHEDULE_SESSION
        )

    # Transitions

    def check(self, booking: Booking, event: SessionEvent) -> bool:
        """
        Validate an event against the booking's current status.

        Returns:
            True if the transition should be applied, False for a replay

        Raises:
            InvalidStateTransitionException: event not allowed from this status
        """
        transition = TRANSITIONS[event]
        if booking.status in transition.from_statuses:
            return True
        if is_replay(booking, event):
            return False
        raise InvalidStateTransitionException(booking.status, event.value)

    @BaseService.measure_operation("apply_transition")
    def apply(self, booking: Booking, event: SessionEvent, **values: Any) -> bool:
        """
        Apply an event inside the caller's transaction.

        Returns:
            True if the session changed, False if the event was a replay
        """
        if not self.check(booking, event):
            self.logger.info(f"Ignoring replayed {event.value} for session {booking.id}")
            return False

        transition = TRANSITIONS[event]
        changes = self._changes_for(booking, event, values)
        changes["status"] = transition.to_status
        changes["updated_at"] = utc_now()

        if not self.repository.transition(booking.id, transition.from_statuses, **changes):
            # Lost a race: re-read and judge the event against the new status
            self.db.refresh(booking)
            if is_replay(booking, event):
                return False
            raise InvalidStateTransitionException(booking.status, event.value)

        if event == SessionEvent.RESCHEDULE:
            # A verified payment carries over to the new slot
            settled = booking.payment_status == PaymentStatus.VERIFIED.value
            self.repository.transition(
                booking.id,
                [S.RESCHEDULED.value],
                status=S.CONFIRMED.value if settled else S.PENDING.value,
            )

        self.log_operation(
            "session_transition",
            session_id=booking.id,
            event=event.value,
            status=booking.status,
        )
        return True

    def _changes_for(
        self, booking: Booking, event: SessionEvent, values: Dict[str, Any]
    ) -> Dict[str, Any]:
        now = utc_now()
        if event == SessionEvent.PAYMENT_VERIFIED:
            return {"payment_status": PaymentStatus.VERIFIED.value, "confirmed_at": now}
        if event == SessionEvent.PAYMENT_FAILED:
            return {"payment_status": PaymentStatus.REJECTED.value}
        if event == SessionEvent.CANCEL:
            return {
                "cancelled_at": now,
                "cancelled_by_id": values.get("cancelled_by_id"),
                "cancellation_reason": values.get("reason"),
            }
        if event == SessionEvent.COMPLETE:
            return {"completed_at": now}
        if event == SessionEvent.RESCHEDULE:
            new_date: date = values["session_date"]
            changes: Dict[str, Any] = {
                "session_date": new_date,
                "session_time": values["session_time"],
                "reschedule_reason": values.get("reason"),
            }
            if booking.original_date is None:
                changes["original_date"] = booking.session_date
                changes["original_time"] = booking.session_time
            return changes
        return {}
