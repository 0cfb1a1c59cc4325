# backend/mentorhub/repositories/booking_repository.py
"""
Booking Repository for MentorHub

Session (booking) persistence: lookups, the paginated listing joined with the
counterparty's public details, and status-guarded transitions.
"""

import logging
from typing import Any, Iterable, List, Optional, Tuple

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException, RepositoryIntegrityError
from ..models.booking import Booking
from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

BookingRow = Tuple[Booking, str, str]


class BookingRepository(BaseRepository[Booking]):
    def __init__(self, db: Session):
        super().__init__(db, Booking)

    def list_with_counterparty(
        self,
        *,
        counterparty: str,
        student_id: Optional[str] = None,
        mentor_id: Optional[str] = None,
        status: Optional[str] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> Tuple[List[BookingRow], int]:
        """
        Page of sessions with the other party's name and email, newest first.

        Args:
            counterparty: "mentor" or "student", whose details to join
            student_id: Restrict to one student's sessions
            mentor_id: Restrict to one mentor's sessions
            status: Optional status filter

        Returns:
            (rows of (booking, name, email), total matching count)
        """
        join_column = Booking.mentor_id if counterparty == "mentor" else Booking.student_id
        try:
            query = self.db.query(Booking, User.name, User.email).join(User, User.id == join_column)
            if student_id is not None:
                query = query.filter(Booking.student_id == student_id)
            if mentor_id is not None:
                query = query.filter(Booking.mentor_id == mentor_id)
            if status is not None:
                query = query.filter(Booking.status == status)

            total = query.order_by(None).count()
            rows = (
                query.order_by(Booking.created_at.desc(), Booking.id.desc())
                .offset(offset)
                .limit(limit)
                .all()
            )
            return [(row[0], row[1], row[2]) for row in rows], total
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing sessions: {str(e)}")
            raise RepositoryException(f"Failed to list sessions: {str(e)}")

    def transition(
        self, session_id: str, from_statuses: Iterable[str], **values: Any
    ) -> bool:
        """
        Conditionally update a session if its status is still one of ``from_statuses``.

        Returns False when another writer moved the session first.
        """
        try:
            result = self.db.execute(
                update(Booking)
                .where(Booking.id == session_id, Booking.status.in_(list(from_statuses)))
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            self.db.flush()
            changed = bool(result.rowcount)
            if changed:
                booking = self.db.get(Booking, session_id)
                if booking is not None:
                    self.db.refresh(booking)
            return changed
        except IntegrityError as exc:
            raise RepositoryIntegrityError(f"Integrity constraint violated: {exc.orig}") from exc
        except SQLAlchemyError as e:
            self.logger.error(f"Error transitioning session {session_id}: {str(e)}")
            raise RepositoryException(f"Failed to update session: {str(e)}")
