# backend/app/core/exceptions.py
"""
Domain-specific exceptions for the booking backend.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

from .enums import RejectionReason

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = HTTP_422_UNPROCESSABLE


class ForbiddenException(DomainException):
    """Raised when user lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Specific business exceptions


class BookingRejectedException(DomainException):
    """
    Surfaces an admission rejection to HTTP clients.

    Inside the booking core rejections are plain values; this exception only
    exists so the route layer can render one as a client error.
    """

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, reason: RejectionReason, details: Optional[Dict[str, Any]] = None):
        self.reason = reason
        super().__init__(message=reason.message, code=reason.value, details=details or {})


class InvalidStatusTransitionException(BusinessRuleException):
    """Raised when a booking is moved out of a terminal state."""

    def __init__(self, current: str, target: str):
        super().__init__(
            message=f"Cannot change booking status from {current} to {target}",
            code="INVALID_STATUS_TRANSITION",
            details={"current_status": current, "target_status": target},
        )


class CancellationWindowException(BusinessRuleException):
    """Raised when a student cancels too close to the class start."""

    def __init__(self, required_hours: int, provided_hours: float):
        super().__init__(
            message=f"Cancellations must be made at least {required_hours} hours in advance",
            code="CANCELLATION_WINDOW_CLOSED",
            details={
                "required_hours": required_hours,
                "provided_hours": round(provided_hours, 2),
            },
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
