"""
Unit tests for the domain error taxonomy.
"""

import pytest

from app.core.errors import (
    AlreadyMemberError,
    CannotLeaveAsOwnerError,
    CapacityExceededError,
    ContentionError,
    DuplicateRequestError,
    ErrorKind,
    InputValidationError,
    InvalidStateError,
    NotFoundError,
    OwnerProtectedError,
    TeamServiceError,
    UnauthorizedError,
)
from app.core.logging import filter_sensitive_data


@pytest.mark.parametrize(
    "error_cls, kind, status_code",
    [
        (NotFoundError, ErrorKind.NOT_FOUND, 404),
        (UnauthorizedError, ErrorKind.UNAUTHORIZED, 403),
        (CapacityExceededError, ErrorKind.CAPACITY_EXCEEDED, 409),
        (AlreadyMemberError, ErrorKind.ALREADY_MEMBER, 409),
        (InvalidStateError, ErrorKind.INVALID_STATE, 409),
        (OwnerProtectedError, ErrorKind.OWNER_PROTECTED, 403),
        (ContentionError, ErrorKind.CONTENTION, 503),
        (InputValidationError, ErrorKind.VALIDATION_ERROR, 422),
    ],
)
def test_error_kind_and_status(error_cls, kind, status_code):
    error = error_cls("boom")

    assert isinstance(error, TeamServiceError)
    assert error.kind == kind
    assert error.status_code == status_code
    assert error.to_dict() == {"detail": "boom", "code": kind.value}


def test_duplicate_request_carries_existing_id():
    error = DuplicateRequestError("already sent", existing_id=42)

    assert error.to_dict() == {"detail": "already sent", "code": "duplicate_request", "existing_id": 42}


def test_cannot_leave_as_owner_is_owner_protected():
    error = CannotLeaveAsOwnerError("transfer first")

    assert isinstance(error, OwnerProtectedError)
    assert error.kind == ErrorKind.OWNER_PROTECTED


def test_filter_sensitive_data_scrubs_tokens_and_join_codes():
    event = {
        "request": {
            "data": {"join_code": "AbC12345", "message": "hi"},
            "headers": {"Authorization": "Bearer abc", "Accept": "application/json"},
        }
    }

    filtered = filter_sensitive_data(event)

    assert filtered["request"]["data"]["join_code"] == "[FILTERED]"
    assert filtered["request"]["data"]["message"] == "hi"
    assert filtered["request"]["headers"]["Authorization"] == "[FILTERED]"
    assert filtered["request"]["headers"]["Accept"] == "application/json"
