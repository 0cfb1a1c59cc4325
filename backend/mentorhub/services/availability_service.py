# backend/mentorhub/services/availability_service.py
"""
Availability Service for MentorHub

Mentors manage one recurring window per day of week plus dated exceptions
(a blackout or replacement hours). Students read a mentor's schedule and
the free start times on a date.
"""

from datetime import date
import logging
from typing import Any, Callable, List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import PermissionName
from ..core.exceptions import (
    ForbiddenException,
    NotFoundException,
    RepositoryException,
    ServiceException,
    ValidationException,
)
from ..core.rbac import AccessContext
from ..models.availability import AvailabilityException, AvailabilityRule
from ..models.booking import SessionDuration
from ..repositories.factory import RepositoryFactory
from ..schemas.availability import AvailabilityExceptionCreate, AvailabilityRuleUpsert
from ..schemas.registry import validate_or_raise
from ..utils.time_helpers import utc_today
from .base import BaseService
from .conflict_checker import ConflictChecker
from .permission_service import PermissionChecker, permission_checker

logger = logging.getLogger(__name__)


class AvailabilityService(BaseService):
    def __init__(
        self,
        db: Session,
        *,
        checker: Optional[PermissionChecker] = None,
        conflict_checker: Optional[ConflictChecker] = None,
        today_provider: Callable[[], date] = utc_today,
    ):
        super().__init__(db)
        self.checker = checker or permission_checker
        self.repository = RepositoryFactory.create_availability_repository(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.conflict_checker = conflict_checker or ConflictChecker(db)
        self._today = today_provider

    @BaseService.measure_operation("set_weekly_availability")
    def set_weekly_availability(self, ctx: AccessContext, payload: Any) -> AvailabilityRule:
        """Create or replace the caller's window for one day of week."""
        self._require_set_availability(ctx)
        data = validate_or_raise("availability-rule", payload, AvailabilityRuleUpsert)

        try:
            with self.transaction():
                rule = self.repository.get_rule(ctx.user_id, data.day_of_week)
                values = data.model_dump()
                if rule is None:
                    rule = self.repository.create(mentor_id=ctx.user_id, **values)
                else:
                    rule = self.repository.update(rule, **values)
        except RepositoryException as exc:
            self.logger.exception(f"Failed to save availability for mentor {ctx.user_id}")
            raise ServiceException("Failed to save availability") from exc

        self.log_operation(
            "set_weekly_availability",
            mentor_id=ctx.user_id,
            day_of_week=rule.day_of_week,
            window=f"{rule.start_time}-{rule.end_time}",
        )
        return rule

    @BaseService.measure_operation("add_availability_exception")
    def add_exception(
        self, ctx: AccessContext, day_of_week: int, payload: Any
    ) -> AvailabilityException:
        """
        Attach a dated exception to the caller's rule for ``day_of_week``.

        An existing exception on the same date is replaced.

        Raises:
            ForbiddenException: caller may not manage availability
            ValidationException: invalid payload, or date not on that weekday
            NotFoundException: no rule for that day
        """
        self._require_set_availability(ctx)
        data = validate_or_raise("availability-exception", payload, AvailabilityExceptionCreate)
        rule = self._get_own_rule(ctx, day_of_week)
        if data.date.isoweekday() % 7 != rule.day_of_week:
            raise ValidationException.for_field(
                "date", "Exception date does not fall on the rule's day of week"
            )

        try:
            with self.transaction():
                existing = rule.exception_for(data.date)
                if existing is not None:
                    self.repository.delete_exception(rule, existing)
                exception = self.repository.add_exception(
                    rule,
                    date=data.date,
                    type=data.type.value,
                    start_time=data.start_time,
                    end_time=data.end_time,
                    reason=data.reason,
                )
        except RepositoryException as exc:
            self.logger.exception(f"Failed to add availability exception for {ctx.user_id}")
            raise ServiceException("Failed to add availability exception") from exc

        self.log_operation(
            "add_availability_exception",
            mentor_id=ctx.user_id,
            date=str(data.date),
            type=exception.type,
        )
        return exception

    @BaseService.measure_operation("remove_availability_exception")
    def remove_exception(self, ctx: AccessContext, day_of_week: int, on_date: date) -> None:
        self._require_set_availability(ctx)
        rule = self._get_own_rule(ctx, day_of_week)
        exception = rule.exception_for(on_date)
        if exception is None:
            raise NotFoundException("Availability exception not found")

        try:
            with self.transaction():
                self.repository.delete_exception(rule, exception)
        except RepositoryException as exc:
            self.logger.exception(f"Failed to remove availability exception for {ctx.user_id}")
            raise ServiceException("Failed to remove availability exception") from exc

    @BaseService.measure_operation("get_mentor_availability")
    def get_mentor_availability(self, mentor_id: str) -> List[AvailabilityRule]:
        self._get_mentor(mentor_id)
        return self.repository.list_rules(mentor_id)

    @BaseService.measure_operation("get_available_slots")
    def get_available_slots(
        self, mentor_id: str, on_date: date, duration: str = SessionDuration.ONE_HOUR.value
    ) -> List[str]:
        """Free start times (HH:MM) on a date for a session of ``duration``."""
        if duration not in {d.value for d in SessionDuration}:
            raise ValidationException.for_field("duration", f"Unknown duration '{duration}'")
        if on_date < self._today():
            raise ValidationException.for_field("date", "Cannot list slots for a past date")
        self._get_mentor(mentor_id)
        return self.conflict_checker.get_available_start_times(
            mentor_id, on_date, duration, settings.availability_slot_step_minutes
        )

    def _require_set_availability(self, ctx: AccessContext) -> None:
        if not self.checker.has_permission(ctx, PermissionName.SET_AVAILABILITY):
            raise ForbiddenException("You don't have permission to manage availability")

    def _get_own_rule(self, ctx: AccessContext, day_of_week: int) -> AvailabilityRule:
        if not 0 <= day_of_week <= 6:
            raise ValidationException.for_field("day_of_week", "Day of week must be 0-6")
        rule = self.repository.get_rule(ctx.user_id, day_of_week)
        if rule is None:
            raise NotFoundException("No availability set for this day")
        return rule

    def _get_mentor(self, mentor_id: str) -> None:
        mentor = self.user_repository.get_by_id(mentor_id)
        if mentor is None or not mentor.is_bookable_mentor:
            raise NotFoundException("Mentor not found")
