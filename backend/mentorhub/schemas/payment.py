# backend/mentorhub/schemas/payment.py
from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import ConfigDict, Field

from ._strict_base import StrictModel, StrictRequestModel


class PaymentCreate(StrictRequestModel):
    """Record a processor payment intent against a pending session."""

    session_id: str = Field(..., min_length=1)
    payment_method: str = Field(..., min_length=1, max_length=50)
    external_reference: str = Field(..., min_length=1, max_length=255)


class PaymentCallback(StrictRequestModel):
    """Outcome reported by the payment processor."""

    external_reference: str = Field(..., min_length=1, max_length=255)
    status: Literal["succeeded", "failed", "cancelled"]
    failure_reason: Optional[str] = Field(None, max_length=500)


class PaymentResponse(StrictModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: str
    session_id: str
    student_id: str
    mentor_id: str
    amount: Decimal
    currency: str
    payment_method: str
    external_reference: str
    status: str
    failure_reason: Optional[str] = None
    processed_at: Optional[datetime] = None
    created_at: datetime
