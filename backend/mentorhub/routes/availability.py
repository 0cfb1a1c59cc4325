# backend/mentorhub/routes/availability.py
"""
Mentor availability routes.

Router Endpoints:
    PUT / - Create or replace the caller's window for one day of week
    POST /{day_of_week}/exceptions - Add a dated exception to that day's window
    DELETE /{day_of_week}/exceptions/{date} - Remove a dated exception
    GET /{mentor_id} - A mentor's weekly windows with exceptions
    GET /{mentor_id}/slots - Free start times on a date
"""

from datetime import date
import logging
from typing import Any, List

from fastapi import APIRouter, Body, Depends, Path, Query

from ..core.enums import PermissionName
from ..core.exceptions import DomainException
from ..core.rbac import AccessContext
from ..dependencies.auth import get_access_context
from ..dependencies.permissions import require_permission
from ..dependencies.services import get_availability_service
from ..models.booking import SessionDuration
from ..schemas.availability import (
    AvailabilityExceptionResponse,
    AvailabilityRuleResponse,
    AvailableSlotsResponse,
)
from ..schemas.base_responses import DeleteResponse
from ..services.availability_service import AvailabilityService
from . import handle_domain_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/availability", tags=["availability"])

require_set_availability = require_permission(PermissionName.SET_AVAILABILITY)


@router.put("", response_model=AvailabilityRuleResponse)
def set_weekly_availability(
    payload: Any = Body(None),
    ctx: AccessContext = Depends(require_set_availability),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilityRuleResponse:
    try:
        rule = availability_service.set_weekly_availability(
            ctx, payload if payload is not None else {}
        )
        return AvailabilityRuleResponse.model_validate(rule)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{day_of_week}/exceptions", response_model=AvailabilityExceptionResponse)
def add_exception(
    day_of_week: int = Path(..., ge=0, le=6),
    payload: Any = Body(None),
    ctx: AccessContext = Depends(require_set_availability),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilityExceptionResponse:
    try:
        exception = availability_service.add_exception(
            ctx, day_of_week, payload if payload is not None else {}
        )
        return AvailabilityExceptionResponse.model_validate(exception)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{day_of_week}/exceptions/{exception_date}", response_model=DeleteResponse)
def remove_exception(
    day_of_week: int = Path(..., ge=0, le=6),
    exception_date: date = Path(...),
    ctx: AccessContext = Depends(require_set_availability),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> DeleteResponse:
    try:
        availability_service.remove_exception(ctx, day_of_week, exception_date)
    except DomainException as e:
        handle_domain_exception(e)
    return DeleteResponse(message="Availability exception removed")


@router.get(
    "/{mentor_id}",
    response_model=List[AvailabilityRuleResponse],
    dependencies=[Depends(get_access_context)],
)
def get_mentor_availability(
    mentor_id: str = Path(..., min_length=1),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> List[AvailabilityRuleResponse]:
    try:
        rules = availability_service.get_mentor_availability(mentor_id)
    except DomainException as e:
        handle_domain_exception(e)
    return [AvailabilityRuleResponse.model_validate(rule) for rule in rules]


@router.get(
    "/{mentor_id}/slots",
    response_model=AvailableSlotsResponse,
    dependencies=[Depends(get_access_context)],
)
def get_available_slots(
    mentor_id: str = Path(..., min_length=1),
    on_date: date = Query(..., alias="date"),
    duration: SessionDuration = Query(SessionDuration.ONE_HOUR),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> AvailableSlotsResponse:
    try:
        slots = availability_service.get_available_slots(mentor_id, on_date, duration.value)
    except DomainException as e:
        handle_domain_exception(e)
    return AvailableSlotsResponse(mentor_id=mentor_id, date=on_date, duration=duration, slots=slots)
