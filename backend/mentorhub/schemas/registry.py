# backend/mentorhub/schemas/registry.py
"""
Named payload schemas.

Business operations validate raw payloads by schema name before any rule
runs. ``validate_payload`` never raises; ``validate_or_raise`` converts a
failure into ``ValidationException`` carrying the per-field error list.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar, cast

from pydantic import BaseModel, ValidationError

from ..core.exceptions import ValidationException
from .availability import AvailabilityExceptionCreate, AvailabilityRuleUpsert
from .booking import BookingCancel, BookingCreate, BookingReschedule
from .payment import PaymentCallback, PaymentCreate
from .review import ReviewCreate, ReviewUpdate

M = TypeVar("M", bound=BaseModel)

SCHEMAS: Mapping[str, Type[BaseModel]] = MappingProxyType(
    {
        "booking-create": BookingCreate,
        "booking-reschedule": BookingReschedule,
        "booking-cancel": BookingCancel,
        "review-create": ReviewCreate,
        "review-update": ReviewUpdate,
        "availability-rule": AvailabilityRuleUpsert,
        "availability-exception": AvailabilityExceptionCreate,
        "payment-create": PaymentCreate,
        "payment-callback": PaymentCallback,
    }
)


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    data: Optional[BaseModel] = None
    errors: List[Dict[str, Any]] = field(default_factory=list)


def _field_errors(exc: ValidationError) -> List[Dict[str, Any]]:
    errors = []
    for error in exc.errors(include_url=False):
        location = ".".join(str(part) for part in error.get("loc", ())) or "__root__"
        message = str(error.get("msg", "Invalid value"))
        # "Value error, <message>" prefix comes from ValueError raised in validators
        if message.startswith("Value error, "):
            message = message[len("Value error, ") :]
        errors.append({"field": location, "message": message, "type": error.get("type")})
    return errors


def validate_payload(schema_name: str, payload: Any) -> ValidationResult:
    schema = SCHEMAS.get(schema_name)
    if schema is None:
        raise KeyError(f"Unknown schema '{schema_name}'")
    if not isinstance(payload, dict):
        return ValidationResult(
            valid=False,
            errors=[{"field": "__root__", "message": "Payload must be an object", "type": "dict_type"}],
        )
    try:
        return ValidationResult(valid=True, data=schema.model_validate(payload))
    except ValidationError as exc:
        return ValidationResult(valid=False, errors=_field_errors(exc))


def validate_or_raise(schema_name: str, payload: Any, model: Type[M]) -> M:
    """Validate and return the typed model, or raise ValidationException."""
    if isinstance(payload, model):
        return payload
    if isinstance(payload, BaseModel):
        payload = payload.model_dump()
    result = validate_payload(schema_name, payload)
    if not result.valid:
        raise ValidationException.from_errors(result.errors)
    return cast(M, result.data)
