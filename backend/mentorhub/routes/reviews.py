# backend/mentorhub/routes/reviews.py
"""
Review routes.

Router Endpoints:
    POST / - Review a completed session
    GET / - List reviews, optionally by mentor or student
    GET /{review_id} - Review details
    PUT /{review_id} - Edit, respond to or moderate a review
    DELETE /{review_id} - Delete a review
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Path, Query

from ..core.exceptions import DomainException
from ..core.rbac import AccessContext
from ..dependencies.auth import get_access_context
from ..dependencies.services import get_review_service
from ..schemas.base_responses import DeleteResponse, PaginatedResponse
from ..schemas.review import ReviewResponse
from ..services.review_service import ReviewService
from . import handle_domain_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.post("", response_model=ReviewResponse)
def create_review(
    payload: Any = Body(None),
    ctx: AccessContext = Depends(get_access_context),
    review_service: ReviewService = Depends(get_review_service),
) -> ReviewResponse:
    try:
        review = review_service.create_review(ctx, payload if payload is not None else {})
        return ReviewResponse.model_validate(review)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("", response_model=PaginatedResponse[ReviewResponse])
def list_reviews(
    mentor_id: Optional[str] = Query(None),
    student_id: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    ctx: AccessContext = Depends(get_access_context),
    review_service: ReviewService = Depends(get_review_service),
) -> PaginatedResponse[ReviewResponse]:
    try:
        result = review_service.list_reviews(
            ctx, mentor_id=mentor_id, student_id=student_id, page=page, limit=limit
        )
    except DomainException as e:
        handle_domain_exception(e)
    items = [ReviewResponse.model_validate(review) for review in result.items]
    return PaginatedResponse[ReviewResponse].build(items, result.total, result.page, result.limit)


@router.get("/{review_id}", response_model=ReviewResponse)
def get_review(
    review_id: str = Path(..., min_length=1),
    ctx: AccessContext = Depends(get_access_context),
    review_service: ReviewService = Depends(get_review_service),
) -> ReviewResponse:
    try:
        return ReviewResponse.model_validate(review_service.get_review(ctx, review_id))
    except DomainException as e:
        handle_domain_exception(e)


@router.put("/{review_id}", response_model=ReviewResponse)
def update_review(
    review_id: str = Path(..., min_length=1),
    payload: Any = Body(None),
    ctx: AccessContext = Depends(get_access_context),
    review_service: ReviewService = Depends(get_review_service),
) -> ReviewResponse:
    try:
        review = review_service.update_review(ctx, review_id, payload if payload is not None else {})
        return ReviewResponse.model_validate(review)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{review_id}", response_model=DeleteResponse)
def delete_review(
    review_id: str = Path(..., min_length=1),
    ctx: AccessContext = Depends(get_access_context),
    review_service: ReviewService = Depends(get_review_service),
) -> DeleteResponse:
    try:
        review_service.delete_review(ctx, review_id)
    except DomainException as e:
        handle_domain_exception(e)
    return DeleteResponse(message="Review deleted")
