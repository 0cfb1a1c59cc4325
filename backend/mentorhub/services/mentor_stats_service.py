# backend/mentorhub/services/mentor_stats_service.py
"""
Mentor profile counters.

Each update runs in its own short transaction right after the triggering
change has committed. A failed counter update is logged and never surfaces
as an error of the booking, payment or review operation.
"""

from decimal import Decimal
import logging

from sqlalchemy.orm import Session

from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


class MentorStatsService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.profile_repository = RepositoryFactory.create_mentor_profile_repository(db)
        self.review_repository = RepositoryFactory.create_review_repository(db)

    def record_session_booked(self, mentor_id: str) -> bool:
        return self._safely(
            "total_sessions", mentor_id, lambda: self.profile_repository.increment_total_sessions(mentor_id)
        )

    def record_earnings(self, mentor_id: str, amount: Decimal) -> bool:
        return self._safely(
            "total_earnings", mentor_id, lambda: self.profile_repository.add_earnings(mentor_id, amount)
        )

    def refresh_rating(self, mentor_id: str) -> bool:
        def _update() -> int:
            average, count = self.review_repository.rating_stats(mentor_id)
            return self.profile_repository.set_rating_stats(mentor_id, average, count)

        return self._safely("average_rating", mentor_id, _update)

    def _safely(self, counter: str, mentor_id: str, update) -> bool:
        try:
            with self.transaction():
                update()
            return True
        except Exception as exc:
            self.logger.error(
                f"Failed to update mentor {counter}",
                extra={"mentor_id": mentor_id, "counter": counter, "error": str(exc)},
            )
            return False
