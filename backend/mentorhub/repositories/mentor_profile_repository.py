# backend/mentorhub/repositories/mentor_profile_repository.py
"""
Mentor profile data access.

Counter updates are single UPDATE statements with the arithmetic done in
SQL, so concurrent increments never lose writes.
"""

from decimal import Decimal
import logging
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.mentor_profile import MentorProfile
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class MentorProfileRepository(BaseRepository[MentorProfile]):
    def __init__(self, db: Session):
        super().__init__(db, MentorProfile)

    def get_by_user_id(self, user_id: str) -> Optional[MentorProfile]:
        return self.find_one_by(user_id=user_id)

    def increment_total_sessions(self, user_id: str, by: int = 1) -> int:
        return self._execute_update(
            user_id, total_sessions=MentorProfile.total_sessions + by
        )

    def add_earnings(self, user_id: str, amount: Decimal) -> int:
        return self._execute_update(
            user_id, total_earnings=MentorProfile.total_earnings + amount
        )

    def set_rating_stats(self, user_id: str, average_rating: Decimal, total_reviews: int) -> int:
        return self._execute_update(
            user_id, average_rating=average_rating, total_reviews=total_reviews
        )

    def _execute_update(self, user_id: str, **values) -> int:
        try:
            result = self.db.execute(
                update(MentorProfile)
                .where(MentorProfile.user_id == user_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            return int(result.rowcount or 0)
        except SQLAlchemyError as e:
            self.logger.error(f"Error updating mentor profile counters for {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to update mentor profile: {str(e)}")
