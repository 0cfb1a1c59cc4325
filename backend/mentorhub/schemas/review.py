# backend/mentorhub/schemas/review.py
from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, Field, field_validator

from ._strict_base import StrictModel, StrictRequestModel


def _clean_skills(skills: Optional[List[str]]) -> Optional[List[str]]:
    if skills is None:
        return None
    return [s.strip() for s in skills if s and s.strip()]


class ReviewCreate(StrictRequestModel):
    session_id: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=10, max_length=500)
    would_recommend: bool
    skills: List[str] = Field(default_factory=list, max_length=10)

    @field_validator("skills")
    @classmethod
    def _strip_skills(cls, v: List[str]) -> List[str]:
        return _clean_skills(v) or []


class ReviewUpdate(StrictRequestModel):
    """
    Partial review update.

    Which fields a caller may set depends on who they are: students edit
    their own review content, mentors respond, admins moderate.
    """

    rating: Optional[int] = Field(None, ge=1, le=5)
    comment: Optional[str] = Field(None, min_length=10, max_length=500)
    would_recommend: Optional[bool] = None
    skills: Optional[List[str]] = Field(None, max_length=10)
    mentor_response: Optional[str] = Field(None, min_length=1, max_length=1000)
    is_approved: Optional[bool] = None

    @field_validator("skills")
    @classmethod
    def _strip_skills(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _clean_skills(v)


class ReviewResponse(StrictModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: str
    session_id: str
    student_id: str
    mentor_id: str
    rating: int
    comment: str
    would_recommend: bool
    skills: List[str] = []
    mentor_response: Optional[str] = None
    responded_at: Optional[datetime] = None
    is_approved: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
