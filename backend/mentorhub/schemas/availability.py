# backend/mentorhub/schemas/availability.py
import datetime as dt
from typing import List, Optional

from pydantic import ConfigDict, Field, field_validator, model_validator

from ..models.availability import ExceptionType
from ..models.booking import SessionDuration
from ..utils.time_helpers import hhmm_to_minutes, normalize_hhmm
from ._strict_base import StrictModel, StrictRequestModel


class AvailabilityRuleUpsert(StrictRequestModel):
    """Weekly window for one day (0 = Sunday)."""

    day_of_week: int = Field(..., ge=0, le=6)
    start_time: str
    end_time: str
    timezone: str = Field(default="UTC", min_length=1, max_length=64)
    is_active: bool = True

    @field_validator("start_time", "end_time")
    @classmethod
    def _normalize_time(cls, v: str) -> str:
        return normalize_hhmm(v)

    @model_validator(mode="after")
    def _check_order(self) -> "AvailabilityRuleUpsert":
        if hhmm_to_minutes(self.start_time) >= hhmm_to_minutes(self.end_time):
            raise ValueError("Start time must be before end time")
        return self


class AvailabilityExceptionCreate(StrictRequestModel):
    date: dt.date
    type: ExceptionType = ExceptionType.UNAVAILABLE
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    reason: Optional[str] = Field(None, max_length=255)

    @field_validator("start_time", "end_time")
    @classmethod
    def _normalize_time(cls, v: Optional[str]) -> Optional[str]:
        return normalize_hhmm(v) if v is not None else None

    @model_validator(mode="after")
    def _check_custom_hours(self) -> "AvailabilityExceptionCreate":
        if self.type == ExceptionType.CUSTOM_HOURS:
            if self.start_time is None or self.end_time is None:
                raise ValueError("Custom hours require start_time and end_time")
            if hhmm_to_minutes(self.start_time) >= hhmm_to_minutes(self.end_time):
                raise ValueError("Start time must be before end time")
        return self


class AvailabilityExceptionResponse(StrictModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: str
    date: dt.date
    type: str
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    reason: Optional[str] = None


class AvailabilityRuleResponse(StrictModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: str
    mentor_id: str
    day_of_week: int
    start_time: str
    end_time: str
    timezone: str
    is_active: bool
    exceptions: List[AvailabilityExceptionResponse] = []
    updated_at: Optional[dt.datetime] = None


class AvailableSlotsResponse(StrictModel):
    mentor_id: str
    date: dt.date
    duration: SessionDuration
    slots: List[str]
