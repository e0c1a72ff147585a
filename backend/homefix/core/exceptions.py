# backend/homefix/core/exceptions.py
"""
Domain-specific exceptions for the HomeFix platform.

Every user-facing failure of the booking engine and the review flow is a
DomainException with a stable ``code``. The API layer converts them with
``to_http_exception``; services never raise HTTPException directly.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    retryable: bool = False

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
    """Raised when a request payload fails business validation."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class NotFoundException(DomainException):
    """Raised when a booking, review or related record is absent."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="NOT_FOUND", details=details)


class ForbiddenException(DomainException):
    """Raised on a role or ownership mismatch."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="FORBIDDEN", details=details)


class ConflictException(DomainException):
    """Raised when the request conflicts with the current state of the data."""

    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = HTTP_422_UNPROCESSABLE


class ServiceException(DomainException):
    """Raised when a service operation fails unexpectedly (storage errors)."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": "An error occurred processing your request",
                "code": "INTERNAL_ERROR",
                "details": {},
            },
        )


# Booking lifecycle


class InvalidTransitionException(ConflictException):
    """Raised when the target status is not reachable from the current one."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(
            message=f"Cannot move booking from {current} to {target}",
            code="INVALID_TRANSITION",
            details={"current_status": current, "target_status": target},
        )


class InvalidPinException(BusinessRuleException):
    def __init__(self, message: str = "Invalid Happy Pin") -> None:
        super().__init__(message=message, code="INVALID_PIN")


class MissingProofException(BusinessRuleException):
    def __init__(self) -> None:
        super().__init__(
            message="At least one proof-of-work image is required to complete a booking",
            code="MISSING_PROOF",
        )


class MissingExtraReasonException(BusinessRuleException):
    def __init__(self, price: Any, final_amount: Any) -> None:
        super().__init__(
            message="A reason is required when the final amount exceeds the quoted price",
            code="MISSING_EXTRA_REASON",
            details={"price": str(price), "final_amount": str(final_amount)},
        )


class StaleStateException(ConflictException):
    """
    Raised when a concurrent writer changed the booking first.

    The caller may re-read the booking and resubmit.
    """

    retryable = True

    def __init__(self, booking_id: str) -> None:
        super().__init__(
            message="Booking was modified by another request; reload and retry",
            code="STALE_STATE",
            details={"booking_id": booking_id, "retryable": True},
        )


# Reviews


class DuplicateReviewException(ConflictException):
    def __init__(self, booking_id: str) -> None:
        super().__init__(
            message="You have already reviewed this booking",
            code="DUPLICATE_REVIEW",
            details={"booking_id": booking_id},
        )


class NotCompletedException(BusinessRuleException):
    def __init__(self, booking_id: str, current_status: str) -> None:
        super().__init__(
            message="You can only review completed bookings",
            code="NOT_COMPLETED",
            details={"booking_id": booking_id, "current_status": current_status},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    Used when data access operations fail, such as connection issues,
    query failures, or constraint violations.
    """
