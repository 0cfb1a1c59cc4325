# backend/mentorhub/services/pricing_service.py
"""
Session pricing.

amount = hourly_rate x duration multiplier, rounded half-up to cents.
Pure functions; no database access.
"""

from decimal import ROUND_HALF_UP, Decimal
import logging
from typing import Dict, Union

from ..core.exceptions import ValidationException
from ..models.booking import SessionDuration

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

DURATION_MULTIPLIERS: Dict[str, Decimal] = {
    SessionDuration.THIRTY_MINUTES.value: Decimal("0.5"),
    SessionDuration.ONE_HOUR.value: Decimal("1"),
    SessionDuration.NINETY_MINUTES.value: Decimal("1.5"),
    SessionDuration.TWO_HOURS.value: Decimal("2"),
}

DURATION_MINUTES: Dict[str, int] = {
    SessionDuration.THIRTY_MINUTES.value: 30,
    SessionDuration.ONE_HOUR.value: 60,
    SessionDuration.NINETY_MINUTES.value: 90,
    SessionDuration.TWO_HOURS.value: 120,
}

# Unknown durations are priced and scheduled as one hour
DEFAULT_MULTIPLIER = Decimal("1")
DEFAULT_DURATION_MINUTES = 60


def _duration_key(duration: Union[str, SessionDuration]) -> str:
    return duration.value if isinstance(duration, SessionDuration) else str(duration)


def duration_multiplier(duration: Union[str, SessionDuration]) -> Decimal:
    key = _duration_key(duration)
    multiplier = DURATION_MULTIPLIERS.get(key)
    if multiplier is None:
        logger.warning("Unknown session duration %r priced as one hour", key)
        return DEFAULT_MULTIPLIER
    return multiplier


def duration_minutes(duration: Union[str, SessionDuration]) -> int:
    return DURATION_MINUTES.get(_duration_key(duration), DEFAULT_DURATION_MINUTES)


def to_money(value: Union[Decimal, float, int, str]) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def price(hourly_rate: Union[Decimal, float, int, str], duration: Union[str, SessionDuration]) -> Decimal:
    """
    Charge for a session of ``duration`` at ``hourly_rate``.

    >>> price(50, "1.5hours")
    Decimal('75.00')
    """
    rate = Decimal(str(hourly_rate))
    if rate < 0:
        raise ValidationException.for_field("hourly_rate", "Hourly rate cannot be negative")
    return to_money(rate * duration_multiplier(duration))
