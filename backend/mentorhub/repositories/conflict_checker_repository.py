# backend/mentorhub/repositories/conflict_checker_repository.py
"""
ConflictChecker Repository for MentorHub

Read-only queries used to decide whether a slot is free: the mentor's active
sessions on a date and the weekly rule (with its exceptions) for a day.
"""

from datetime import date
import logging
from typing import List, Optional, cast

from sqlalchemy.orm import Session, selectinload

from ..core.exceptions import RepositoryException
from ..models.availability import AvailabilityRule
from ..models.booking import ACTIVE_STATUSES, Booking
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ConflictCheckerRepository(BaseRepository[Booking]):
    def __init__(self, db: Session):
        super().__init__(db, Booking)

    def get_active_sessions_for_date(
        self, mentor_id: str, check_date: date, exclude_session_id: Optional[str] = None
    ) -> List[Booking]:
        """
        Sessions that could conflict with a candidate slot.

        Args:
            mentor_id: The mentor to check
            check_date: The date to check for conflicts
            exclude_session_id: Optional session ID to leave out (reschedule)

        Returns:
            Pending and confirmed sessions ordered by start time
        """
        try:
            query = self.db.query(Booking).filter(
                Booking.mentor_id == mentor_id,
                Booking.session_date == check_date,
                Booking.status.in_(ACTIVE_STATUSES),
            )
            if exclude_session_id:
                query = query.filter(Booking.id != exclude_session_id)

            return cast(List[Booking], query.order_by(Booking.session_time).all())
        except Exception as e:
            self.logger.error(f"Error getting sessions for conflict check: {str(e)}")
            raise RepositoryException(f"Failed to get conflict sessions: {str(e)}")

    def get_active_rule(self, mentor_id: str, day_of_week: int) -> Optional[AvailabilityRule]:
        try:
            return cast(
                Optional[AvailabilityRule],
                self.db.query(AvailabilityRule)
                .options(selectinload(AvailabilityRule.exceptions))
                .filter(
                    AvailabilityRule.mentor_id == mentor_id,
                    AvailabilityRule.day_of_week == day_of_week,
                    AvailabilityRule.is_active.is_(True),
                )
                .first(),
            )
        except Exception as e:
            self.logger.error(f"Error getting availability rule: {str(e)}")
            raise RepositoryException(f"Failed to get availability rule: {str(e)}")
