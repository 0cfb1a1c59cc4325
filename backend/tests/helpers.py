# backend/tests/helpers.py
from datetime import date
from typing import Optional

from mentorhub.core.enums import RoleName
from mentorhub.core.rbac import AccessContext
from mentorhub.models.user import User

# Friday; the scenario date 2024-12-25 is the following Wednesday
TODAY = date(2024, 12, 20)
WEDNESDAY = date(2024, 12, 25)


def ctx_for(user: User, **resource) -> AccessContext:
    return AccessContext(user_id=user.id, role=RoleName(user.role), **resource)


def booking_payload(mentor_id: str, **overrides) -> dict:
    payload = {
        "mentor_id": mentor_id,
        "session_date": WEDNESDAY.isoformat(),
        "session_time": "10:00",
        "duration": "1hour",
        "subject": "Python basics",
    }
    payload.update(overrides)
    return payload


def auth_headers(user: User, role: Optional[str] = None) -> dict:
    return {"X-User-Id": user.id, "X-User-Role": role or user.role}
