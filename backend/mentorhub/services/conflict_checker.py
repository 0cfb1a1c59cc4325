# backend/mentorhub/services/conflict_checker.py
"""
Conflict Checker Service for MentorHub

Decides whether a candidate slot (date, start time, duration) is free for a
mentor. Checks run in a fixed order and the first failure wins:

1. overlap with the mentor's pending/confirmed sessions that day
2. the weekly window for that day (custom hours replace it for the date)
3. an "unavailable" exception on that exact date

Intervals are half-open minute ranges since midnight, so a session ending at
11:00 does not collide with one starting at 11:00.

The checker only reads. Serialization against concurrent bookings is the
booking service's job.
"""

from dataclasses import dataclass, field
from datetime import date
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..models.availability import AvailabilityException, AvailabilityRule, ExceptionType
from ..repositories.conflict_checker_repository import ConflictCheckerRepository
from ..repositories.factory import RepositoryFactory
from ..utils.time_helpers import day_of_week, hhmm_to_minutes, minutes_to_hhmm
from .base import BaseService
from .pricing_service import duration_minutes

logger = logging.getLogger(__name__)

ALREADY_BOOKED_REASON = "Mentor already has a session at this time"
NOT_AVAILABLE_DAY_REASON = "Mentor is not available on this day"
OUTSIDE_HOURS_REASON = "Session time is outside mentor's available hours"
UNAVAILABLE_DATE_REASON = "Mentor is unavailable on this specific date"


@dataclass(frozen=True)
class SlotCheckResult:
    free: bool
    reason: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def blocked(cls, reason: str, **details: Any) -> "SlotCheckResult":
        return cls(free=False, reason=reason, details=details)


def intervals_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    """Half-open interval intersection; touching boundaries do not overlap."""
    return start_a < end_b and start_b < end_a


def effective_window(
    rule: AvailabilityRule, on_date: date
) -> Tuple[int, int, Optional[AvailabilityException]]:
    """Window bounds in minutes for a date, applying a custom-hours exception."""
    exception = rule.exception_for(on_date)
    if exception is not None and exception.type == ExceptionType.CUSTOM_HOURS.value:
        return hhmm_to_minutes(exception.start_time), hhmm_to_minutes(exception.end_time), exception
    return hhmm_to_minutes(rule.start_time), hhmm_to_minutes(rule.end_time), exception


class ConflictChecker(BaseService):
    """Slot availability checks against sessions and the availability model."""

    def __init__(self, db: Session, repository: Optional[ConflictCheckerRepository] = None):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_conflict_checker_repository(db)

    @BaseService.measure_operation("is_slot_free")
    def is_slot_free(
        self,
        mentor_id: str,
        check_date: date,
        start_time: str,
        duration: str,
        exclude_session_id: Optional[str] = None,
    ) -> SlotCheckResult:
        """
        Check a candidate slot.

        Args:
            mentor_id: The mentor to check
            check_date: Session date
            start_time: Start as HH:MM
            duration: Duration value ("30min", "1hour", ...)
            exclude_session_id: Session to ignore (the one being rescheduled)

        Returns:
            SlotCheckResult with the first failing reason, if any
        """
        start = hhmm_to_minutes(start_time)
        end = start + duration_minutes(duration)

        for existing in self.repository.get_active_sessions_for_date(
            mentor_id, check_date, exclude_session_id
        ):
            existing_start = hhmm_to_minutes(existing.session_time)
            existing_end = existing_start + duration_minutes(existing.duration)
            if intervals_overlap(start, end, existing_start, existing_end):
                self.logger.info(
                    f"Slot {check_date} {start_time} for mentor {mentor_id} "
                    f"overlaps session {existing.id}"
                )
                return SlotCheckResult.blocked(ALREADY_BOOKED_REASON)

        rule = self.repository.get_active_rule(mentor_id, day_of_week(check_date))
        if rule is None:
            return SlotCheckResult.blocked(NOT_AVAILABLE_DAY_REASON)

        window_start, window_end, exception = effective_window(rule, check_date)
        if not (window_start <= start and end <= window_end):
            return SlotCheckResult.blocked(
                OUTSIDE_HOURS_REASON,
                available_from=minutes_to_hhmm(window_start),
                available_until=minutes_to_hhmm(window_end),
            )

        if exception is not None and exception.is_unavailable:
            return SlotCheckResult.blocked(
                UNAVAILABLE_DATE_REASON, exception_reason=exception.reason
            )

        return SlotCheckResult(free=True)

    @BaseService.measure_operation("get_available_start_times")
    def get_available_start_times(
        self, mentor_id: str, on_date: date, duration: str, step_minutes: int
    ) -> List[str]:
        """Start times (HH:MM) on a date at which a session of ``duration`` would be free."""
        rule = self.repository.get_active_rule(mentor_id, day_of_week(on_date))
        if rule is None:
            return []

        window_start, window_end, exception = effective_window(rule, on_date)
        if exception is not None and exception.is_unavailable:
            return []

        length = duration_minutes(duration)
        booked = [
            (
                hhmm_to_minutes(s.session_time),
                hhmm_to_minutes(s.session_time) + duration_minutes(s.duration),
            )
            for s in self.repository.get_active_sessions_for_date(mentor_id, on_date)
        ]

        slots = []
        start = window_start
        while start + length <= window_end:
            end = start + length
            if not any(intervals_overlap(start, end, b_start, b_end) for b_start, b_end in booked):
                slots.append(minutes_to_hhmm(start))
            start += step_minutes
        return slots
