# backend/mentorhub/repositories/availability_repository.py
from datetime import date
import logging
from typing import List, Optional, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..core.exceptions import RepositoryException
from ..models.availability import AvailabilityException, AvailabilityRule
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AvailabilityRepository(BaseRepository[AvailabilityRule]):
    """Weekly rules and their dated exceptions."""

    def __init__(self, db: Session):
        super().__init__(db, AvailabilityRule)

    def get_rule(self, mentor_id: str, day_of_week: int) -> Optional[AvailabilityRule]:
        return self.find_one_by(mentor_id=mentor_id, day_of_week=day_of_week)

    def list_rules(self, mentor_id: str, active_only: bool = False) -> List[AvailabilityRule]:
        try:
            query = (
                self.db.query(AvailabilityRule)
                .options(selectinload(AvailabilityRule.exceptions))
                .filter(AvailabilityRule.mentor_id == mentor_id)
            )
            if active_only:
                query = query.filter(AvailabilityRule.is_active.is_(True))
            return cast(List[AvailabilityRule], query.order_by(AvailabilityRule.day_of_week).all())
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing availability for {mentor_id}: {str(e)}")
            raise RepositoryException(f"Failed to list availability: {str(e)}")

    def get_exception(self, rule_id: str, on_date: date) -> Optional[AvailabilityException]:
        try:
            return cast(
                Optional[AvailabilityException],
                self.db.query(AvailabilityException)
                .filter(
                    AvailabilityException.rule_id == rule_id,
                    AvailabilityException.date == on_date,
                )
                .first(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting availability exception: {str(e)}")
            raise RepositoryException(f"Failed to get availability exception: {str(e)}")

    def add_exception(self, rule: AvailabilityRule, **values) -> AvailabilityException:
        try:
            exception = AvailabilityException(**values)
            rule.exceptions.append(exception)
            self.db.flush()
            return exception
        except SQLAlchemyError as e:
            self.logger.error(f"Error adding availability exception: {str(e)}")
            raise RepositoryException(f"Failed to add availability exception: {str(e)}")

    def delete_exception(self, rule: AvailabilityRule, exception: AvailabilityException) -> None:
        try:
            rule.exceptions.remove(exception)
            self.db.flush()
        except SQLAlchemyError as e:
            self.logger.error(f"Error deleting availability exception: {str(e)}")
            raise RepositoryException(f"Failed to delete availability exception: {str(e)}")
