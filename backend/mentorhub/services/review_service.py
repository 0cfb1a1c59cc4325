# backend/mentorhub/services/review_service.py
"""
Review Service for MentorHub

Students review completed sessions once. Mentors may respond, admins may
moderate. Every change that affects ratings recomputes the mentor's
average and review count.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
import logging
import math
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import PermissionName
from ..core.exceptions import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
    RepositoryException,
    RepositoryIntegrityError,
    ServiceException,
    ValidationException,
)
from ..core.rbac import AccessContext
from ..models.booking import SessionStatus
from ..models.notification import NotificationType
from ..models.review import Review
from ..repositories.factory import RepositoryFactory
from ..schemas.registry import validate_or_raise
from ..schemas.review import ReviewCreate, ReviewUpdate
from ..utils.time_helpers import ensure_aware, utc_now
from .base import BaseService
from .mentor_stats_service import MentorStatsService
from .notification_service import NotificationEvent, NotificationService
from .permission_service import PermissionChecker, permission_checker

logger = logging.getLogger(__name__)

STUDENT_EDITABLE_FIELDS = frozenset({"rating", "comment", "would_recommend", "skills"})
RATING_FIELDS = frozenset({"rating", "is_approved"})


@dataclass(frozen=True)
class ReviewPage:
    items: List[Review]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


class ReviewService(BaseService):
    def __init__(
        self,
        db: Session,
        *,
        checker: Optional[PermissionChecker] = None,
        notification_service: Optional[NotificationService] = None,
        now_provider: Callable[[], datetime] = utc_now,
    ):
        super().__init__(db)
        self.checker = checker or permission_checker
        self.repository = RepositoryFactory.create_review_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.notifications = notification_service or NotificationService(db)
        self.mentor_stats = MentorStatsService(db)
        self._now = now_provider

    @BaseService.measure_operation("create_review")
    def create_review(self, ctx: AccessContext, payload: Any) -> Review:
        """
        Review a completed session as its student.

        Raises:
            ForbiddenException: caller may not write reviews or is not the session's student
            ValidationException: invalid payload or session not completed
            NotFoundException: session does not exist
            ConflictException: session already reviewed
        """
        if not self.checker.has_permission(ctx, PermissionName.WRITE_REVIEWS):
            raise ForbiddenException("You don't have permission to write reviews")
        data = validate_or_raise("review-create", payload, ReviewCreate)

        booking = self.booking_repository.get_by_id(data.session_id)
        if booking is None:
            raise NotFoundException("Session not found")
        if booking.student_id != ctx.user_id:
            raise ForbiddenException("You can only review your own sessions")
        if booking.status != SessionStatus.COMPLETED.value:
            raise ValidationException.for_field("session_id", "Only completed sessions can be reviewed")
        if self.repository.get_by_session_id(booking.id) is not None:
            raise ConflictException("This session has already been reviewed", code="REVIEW_EXISTS")

        try:
            with self.transaction():
                review = self.repository.create(
                    session_id=booking.id,
                    student_id=ctx.user_id,
                    mentor_id=booking.mentor_id,
                    rating=data.rating,
                    comment=data.comment,
                    would_recommend=data.would_recommend,
                    skills=data.skills,
                )
        except RepositoryIntegrityError as exc:
            raise ConflictException(
                "This session has already been reviewed", code="REVIEW_EXISTS"
            ) from exc
        except RepositoryException as exc:
            self.logger.exception(f"Failed to create review for session {booking.id}")
            raise ServiceException("Failed to create review") from exc

        self.log_operation("create_review", review_id=review.id, mentor_id=review.mentor_id)
        self.mentor_stats.refresh_rating(review.mentor_id)
        self.notifications.emit(
            NotificationEvent(
                user_id=review.mentor_id,
                type=NotificationType.REVIEW,
                title="New Review Received",
                message=f"You received a {review.rating}-star review",
                data={"review_id": review.id, "session_id": booking.id},
            )
        )
        return review

    @BaseService.measure_operation("update_review")
    def update_review(self, ctx: AccessContext, review_id: str, payload: Any) -> Review:
        """
        Apply a partial update; the allowed fields depend on the caller.

        Admins with ``moderate_reviews`` may change anything. The reviewed
        mentor may only set ``mentor_response``. The student who wrote the
        review may edit its content within the edit window.
        """
        review = self._get_review(review_id)
        data = validate_or_raise("review-update", payload, ReviewUpdate)
        changes: Dict[str, Any] = data.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationException("No fields to update")

        if self.checker.has_permission(ctx, PermissionName.MODERATE_REVIEWS):
            pass
        elif ctx.user_id == review.mentor_id:
            if not self.checker.has_permission(ctx, PermissionName.RESPOND_TO_REVIEWS):
                raise ForbiddenException("You don't have permission to respond to reviews")
            if set(changes) != {"mentor_response"}:
                raise ForbiddenException("Mentors can only respond to reviews")
        elif ctx.user_id == review.student_id:
            if not self.checker.has_permission(ctx, PermissionName.EDIT_OWN_REVIEWS):
                raise ForbiddenException("You don't have permission to edit reviews")
            if not set(changes) <= STUDENT_EDITABLE_FIELDS:
                raise ForbiddenException("You can only edit your review's content")
            window = timedelta(days=settings.review_edit_window_days)
            if self._now() - ensure_aware(review.created_at) > window:
                raise ForbiddenException(
                    f"Reviews can only be edited within {settings.review_edit_window_days} days",
                    code="REVIEW_EDIT_WINDOW_EXPIRED",
                )
        else:
            raise ForbiddenException("You don't have permission to update this review")

        if "mentor_response" in changes:
            changes["responded_at"] = self._now()

        try:
            with self.transaction():
                self.repository.update(review, **changes)
        except RepositoryException as exc:
            self.logger.exception(f"Failed to update review {review_id}")
            raise ServiceException("Failed to update review") from exc

        self.log_operation("update_review", review_id=review.id, fields=sorted(changes))
        if RATING_FIELDS & set(changes):
            self.mentor_stats.refresh_rating(review.mentor_id)
        if "mentor_response" in changes and ctx.user_id == review.mentor_id:
            self.notifications.emit(
                NotificationEvent(
                    user_id=review.student_id,
                    type=NotificationType.REVIEW,
                    title="Mentor Responded to Your Review",
                    message="Your mentor responded to your review",
                    data={"review_id": review.id},
                )
            )
        return review

    @BaseService.measure_operation("delete_review")
    def delete_review(self, ctx: AccessContext, review_id: str) -> None:
        review = self._get_review(review_id)

        if not self.checker.has_permission(ctx, PermissionName.DELETE_ANY_REVIEW):
            if ctx.user_id != review.student_id or not self.checker.has_permission(
                ctx, PermissionName.DELETE_OWN_REVIEWS
            ):
                raise ForbiddenException("You don't have permission to delete this review")
            window = timedelta(hours=settings.review_delete_window_hours)
            if self._now() - ensure_aware(review.created_at) > window:
                raise ForbiddenException(
                    f"Reviews can only be deleted within {settings.review_delete_window_hours} hours",
                    code="REVIEW_DELETE_WINDOW_EXPIRED",
                )

        mentor_id = review.mentor_id
        try:
            with self.transaction():
                self.repository.delete(review)
        except RepositoryException as exc:
            self.logger.exception(f"Failed to delete review {review_id}")
            raise ServiceException("Failed to delete review") from exc

        self.log_operation("delete_review", review_id=review_id, deleted_by=ctx.user_id)
        self.mentor_stats.refresh_rating(mentor_id)

    @BaseService.measure_operation("get_review")
    def get_review(self, ctx: AccessContext, review_id: str) -> Review:
        self._require_view(ctx)
        review = self._get_review(review_id)
        if not review.is_approved and not self._sees_unapproved(ctx, review):
            raise NotFoundException("Review not found")
        return review

    @BaseService.measure_operation("list_reviews")
    def list_reviews(
        self,
        ctx: AccessContext,
        mentor_id: Optional[str] = None,
        student_id: Optional[str] = None,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> ReviewPage:
        self._require_view(ctx)
        page = max(page, 1)
        limit = min(max(limit or settings.default_page_size, 1), settings.max_page_size)
        approved_only = not self.checker.has_permission(ctx, PermissionName.MODERATE_REVIEWS)
        try:
            reviews, total = self.repository.list_reviews(
                mentor_id=mentor_id,
                student_id=student_id,
                approved_only=approved_only,
                offset=(page - 1) * limit,
                limit=limit,
            )
        except RepositoryException as exc:
            self.logger.exception("Failed to list reviews")
            raise ServiceException("Failed to list reviews") from exc
        return ReviewPage(items=reviews, total=total, page=page, limit=limit)

    def _get_review(self, review_id: str) -> Review:
        review = self.repository.get_by_id(review_id)
        if review is None:
            raise NotFoundException("Review not found")
        return review

    def _require_view(self, ctx: AccessContext) -> None:
        if not self.checker.has_permission(ctx, PermissionName.VIEW_REVIEWS):
            raise ForbiddenException("You don't have permission to view reviews")

    def _sees_unapproved(self, ctx: AccessContext, review: Review) -> bool:
        return (
            self.checker.has_permission(ctx, PermissionName.MODERATE_REVIEWS)
            or ctx.user_id in (review.student_id, review.mentor_id)
        )
