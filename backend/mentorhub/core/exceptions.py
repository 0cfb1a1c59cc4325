# backend/mentorhub/core/exceptions.py
"""
Domain-specific exceptions for the MentorHub platform.

Every error kind the booking and authorization core can surface is a
``DomainException`` subclass carrying a human message, a machine-readable
code and optional structured details. Routes convert them with
``to_http_exception()``.

Only conflicts put their message on the wire; every other kind responds
with its ``public_message`` and the specific message stays server side.
"""

from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code: Optional[str] = None
    public_message: Optional[str] = "An error occurred processing your request"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.default_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.public_message or self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when a payload fails shape or semantic validation."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "VALIDATION_ERROR"
    public_message = "Invalid request data"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = dict(details or {})
        details.setdefault("errors", [{"field": None, "message": message}])
        super().__init__(message, code=code, details=details)

    @classmethod
    def from_errors(
        cls, errors: List[Dict[str, Any]], message: str = "Invalid request data"
    ) -> "ValidationException":
        return cls(message, details={"errors": errors})

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationException":
        return cls(message, details={"errors": [{"field": field, "message": message}]})


class NotFoundException(DomainException):
    """Raised when a resource is absent or the caller cannot see it."""

    status_code = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"
    public_message = "The requested resource was not found"


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT
    default_code = "CONFLICT"
    public_message = None


class UnauthorizedException(DomainException):
    """Raised when no authenticated identity is present."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_code = "UNAUTHORIZED"
    public_message = "Authentication required"


class ForbiddenException(DomainException):
    """Raised when user lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN
    default_code = "FORBIDDEN"
    public_message = "You don't have permission to perform this action"


class ServiceException(DomainException):
    """Raised when a service operation fails unexpectedly."""

    default_code = "INTERNAL_ERROR"

    def to_http_exception(self) -> HTTPException:
        # Internal failure details stay in the logs
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.public_message,
                "code": self.code,
                "details": {},
            },
        )


# Specific business exceptions


class BookingConflictException(ConflictException):
    """Raised when a requested slot is not free for the mentor."""

    def __init__(
        self,
        reason: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        reason = reason or "This time slot conflicts with an existing booking"
        super().__init__(
            message=reason,
            code="BOOKING_CONFLICT",
            details={"reason": reason, **(details or {})},
        )
        self.reason = reason


class InvalidStateTransitionException(ConflictException):
    """Raised when a lifecycle event is not allowed from the current status."""

    public_message = "This action is not allowed in the session's current status"

    def __init__(self, current_status: str, event: str, message: Optional[str] = None):
        super().__init__(
            message=message or f"Cannot {event} a session that is {current_status}",
            code="INVALID_STATE_TRANSITION",
            details={"current_status": current_status, "event": event},
        )
        self.current_status = current_status
        self.event = event


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    Used when data access operations fail, such as database connection
    issues, query failures, or constraint violations.
    """


class RepositoryIntegrityError(RepositoryException):
    """A write violated a storage-level constraint (unique index, FK, check)."""
