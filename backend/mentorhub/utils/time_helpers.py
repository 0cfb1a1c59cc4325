import re
from datetime import date, datetime, timezone
from typing import Optional

# Accepts "9:00" as well as "09:00"; 24:00 is not a valid start/end
HHMM_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")

MINUTES_PER_DAY = 24 * 60


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_today() -> date:
    return utc_now().date()


def ensure_aware(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes (as returned by SQLite) as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def is_valid_hhmm(value: str) -> bool:
    return bool(HHMM_PATTERN.match(value or ""))


def normalize_hhmm(value: str) -> str:
    """Zero-pad an HH:MM string ("9:05" -> "09:05")."""
    if not is_valid_hhmm(value):
        raise ValueError("Time must be in HH:MM format")
    hours, minutes = value.split(":")
    return f"{int(hours):02d}:{minutes}"


def hhmm_to_minutes(value: str) -> int:
    """Minutes since midnight for an HH:MM string."""
    if not is_valid_hhmm(value):
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def day_of_week(value: date) -> int:
    """Day index with Sunday = 0 through Saturday = 6."""
    return value.isoweekday() % 7
