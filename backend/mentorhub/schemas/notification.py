# backend/mentorhub/schemas/notification.py
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ._strict_base import StrictModel


class NotificationResponse(StrictModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: str
    type: str
    title: str
    message: str
    data: Dict[str, Any] = {}
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime


class NotificationListResponse(BaseModel):
    """Offset page of the caller's inbox."""

    items: List[NotificationResponse]
    total: int = Field(description="Notifications matching the filters")
    unread_count: int = Field(description="Unread notifications regardless of filters")
    offset: int = Field(ge=0)
    limit: int = Field(ge=1)


class MarkAllReadResponse(BaseModel):
    success: bool = True
    message: str
    count: int
