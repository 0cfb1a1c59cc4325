# backend/mentorhub/routes/bookings.py
"""
Booking routes.

Router Endpoints:
    POST / - Book a session with a mentor
    GET / - List the caller's sessions (all sessions for admins)
    GET /{session_id} - Session details
    POST /{session_id}/cancel - Cancel a pending or confirmed session
    POST /{session_id}/complete - Mark a confirmed session completed
    POST /{session_id}/reschedule - Move a session to a new free slot
    DELETE /{session_id} - Delete a session (admin only)

Request bodies are read as raw JSON and validated by the service, after
the permission check.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Path, Query

from ..core.enums import PermissionName
from ..core.exceptions import DomainException
from ..core.rbac import AccessContext
from ..dependencies.auth import get_access_context
from ..dependencies.permissions import require_permission
from ..dependencies.services import get_booking_service
from ..schemas.base_responses import DeleteResponse, PaginatedResponse
from ..schemas.booking import BookingCreateResponse, BookingListItem, BookingResponse
from ..services.booking_service import BookingService
from . import handle_domain_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("", response_model=BookingCreateResponse)
def create_booking(
    payload: Any = Body(None),
    ctx: AccessContext = Depends(get_access_context),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingCreateResponse:
    try:
        result = booking_service.create_booking(ctx, payload if payload is not None else {})
        return BookingCreateResponse(
            session=BookingResponse.model_validate(result.session),
            amount=result.amount,
            currency=result.session.currency,
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.get("", response_model=PaginatedResponse[BookingListItem])
def list_bookings(
    status: Optional[str] = Query(None, description="Filter by session status"),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    ctx: AccessContext = Depends(get_access_context),
    booking_service: BookingService = Depends(get_booking_service),
) -> PaginatedResponse[BookingListItem]:
    try:
        result = booking_service.list_bookings(ctx, status=status, page=page, limit=limit)
    except DomainException as e:
        handle_domain_exception(e)

    items = [
        BookingListItem(
            **BookingResponse.model_validate(booking).model_dump(),
            counterparty_name=name,
            counterparty_email=email,
        )
        for booking, name, email in result.items
    ]
    return PaginatedResponse[BookingListItem].build(items, result.total, result.page, result.limit)


@router.get("/{session_id}", response_model=BookingResponse)
def get_booking(
    session_id: str = Path(..., min_length=1),
    ctx: AccessContext = Depends(get_access_context),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        return BookingResponse.model_validate(booking_service.get_booking(ctx, session_id))
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{session_id}/cancel", response_model=BookingResponse)
def cancel_booking(
    session_id: str = Path(..., min_length=1),
    payload: Any = Body(None),
    ctx: AccessContext = Depends(get_access_context),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = booking_service.cancel_booking(ctx, session_id, payload)
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{session_id}/complete", response_model=BookingResponse)
def complete_booking(
    session_id: str = Path(..., min_length=1),
    ctx: AccessContext = Depends(get_access_context),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        return BookingResponse.model_validate(booking_service.complete_booking(ctx, session_id))
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{session_id}/reschedule", response_model=BookingResponse)
def reschedule_booking(
    session_id: str = Path(..., min_length=1),
    payload: Any = Body(None),
    ctx: AccessContext = Depends(get_access_context),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = booking_service.reschedule_booking(
            ctx, session_id, payload if payload is not None else {}
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{session_id}", response_model=DeleteResponse)
def delete_booking(
    session_id: str = Path(..., min_length=1),
    ctx: AccessContext = Depends(require_permission(PermissionName.MANAGE_SESSIONS)),
    booking_service: BookingService = Depends(get_booking_service),
) -> DeleteResponse:
    try:
        booking_service.delete_booking(ctx, session_id)
    except DomainException as e:
        handle_domain_exception(e)
    return DeleteResponse(message="Session deleted")
