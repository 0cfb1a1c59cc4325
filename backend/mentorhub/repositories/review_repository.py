# backend/mentorhub/repositories/review_repository.py
from decimal import ROUND_HALF_UP, Decimal
import logging
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.review import Review
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ReviewRepository(BaseRepository[Review]):
    def __init__(self, db: Session):
        super().__init__(db, Review)

    def get_by_session_id(self, session_id: str) -> Optional[Review]:
        return self.find_one_by(session_id=session_id)

    def list_reviews(
        self,
        *,
        mentor_id: Optional[str] = None,
        student_id: Optional[str] = None,
        approved_only: bool = True,
        offset: int = 0,
        limit: int = 10,
    ) -> Tuple[List[Review], int]:
        try:
            query = self.db.query(Review)
            if mentor_id is not None:
                query = query.filter(Review.mentor_id == mentor_id)
            if student_id is not None:
                query = query.filter(Review.student_id == student_id)
            if approved_only:
                query = query.filter(Review.is_approved.is_(True))
            total = query.count()
            reviews = (
                query.order_by(Review.created_at.desc(), Review.id.desc())
                .offset(offset)
                .limit(limit)
                .all()
            )
            return reviews, total
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing reviews: {str(e)}")
            raise RepositoryException(f"Failed to list reviews: {str(e)}")

    def rating_stats(self, mentor_id: str) -> Tuple[Decimal, int]:
        """Average rating (2 decimals) and count over the mentor's approved reviews."""
        try:
            average, count = (
                self.db.query(func.avg(Review.rating), func.count(Review.id))
                .filter(Review.mentor_id == mentor_id, Review.is_approved.is_(True))
                .one()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error computing rating stats for {mentor_id}: {str(e)}")
            raise RepositoryException(f"Failed to compute rating stats: {str(e)}")
        if not count:
            return Decimal("0.00"), 0
        rounded = Decimal(str(average)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        return rounded, int(count)
