# backend/mentorhub/repositories/user_repository.py
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    def __init__(self, db: Session):
        super().__init__(db, User)

    def lock_for_update(self, user_id: str) -> Optional[User]:
        """
        Take a row lock on the user for the rest of the transaction.

        Used to serialize booking writes per mentor. SQLite ignores FOR UPDATE.
        """
        try:
            return (
                self.db.query(User)
                .filter(User.id == user_id)
                .with_for_update()
                .populate_existing()
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error locking user {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to lock user: {str(e)}")
