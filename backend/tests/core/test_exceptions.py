import pytest

from homefix.core.exceptions import (
    DuplicateReviewException,
    ForbiddenException,
    InvalidPinException,
    InvalidTransitionException,
    MissingExtraReasonException,
    MissingProofException,
    NotCompletedException,
    NotFoundException,
    ServiceException,
    StaleStateException,
    ValidationException,
)


@pytest.mark.parametrize(
    "exc,status,code",
    [
        (NotFoundException("x"), 404, "NOT_FOUND"),
        (ForbiddenException("x"), 403, "FORBIDDEN"),
        (InvalidTransitionException("COMPLETED", "ACCEPTED"), 409, "INVALID_TRANSITION"),
        (InvalidPinException(), 422, "INVALID_PIN"),
        (MissingProofException(), 422, "MISSING_PROOF"),
        (MissingExtraReasonException(500, 650), 422, "MISSING_EXTRA_REASON"),
        (DuplicateReviewException("b1"), 409, "DUPLICATE_REVIEW"),
        (NotCompletedException("b1", "ACCEPTED"), 422, "NOT_COMPLETED"),
        (StaleStateException("b1"), 409, "STALE_STATE"),
        (ValidationException("x"), 400, "VALIDATION_ERROR"),
    ],
)
def test_http_mapping(exc, status, code):
    http_exc = exc.to_http_exception()
    assert http_exc.status_code == status
    assert http_exc.detail["code"] == code


def test_only_stale_state_is_retryable():
    assert StaleStateException("b1").retryable is True
    assert InvalidTransitionException("A", "B").retryable is False


def test_service_exception_hides_internals():
    http_exc = ServiceException("Database operation failed: connection reset").to_http_exception()
    assert http_exc.status_code == 500
    assert http_exc.detail["code"] == "INTERNAL_ERROR"
    assert "connection reset" not in http_exc.detail["message"]
