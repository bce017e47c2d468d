"""
Typed domain errors for team membership operations.

Every rule violation raised by the services is a ``TeamServiceError``
subclass. The API layer turns them into JSON responses with the status code
and ``code`` attached to each kind; nothing in the services catches them.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Error taxonomy exposed to callers"""
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    ALREADY_MEMBER = "already_member"
    DUPLICATE_REQUEST = "duplicate_request"
    INVALID_STATE = "invalid_state"
    OWNER_PROTECTED = "owner_protected"
    CONTENTION = "contention"
    VALIDATION_ERROR = "validation_error"


class TeamServiceError(Exception):
    """Base class for all domain errors."""

    kind: ErrorKind
    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, "code": self.kind.value}


class NotFoundError(TeamServiceError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404


class UnauthorizedError(TeamServiceError):
    kind = ErrorKind.UNAUTHORIZED
    status_code = 403


class CapacityExceededError(TeamServiceError):
    kind = ErrorKind.CAPACITY_EXCEEDED
    status_code = 409


class AlreadyMemberError(TeamServiceError):
    kind = ErrorKind.ALREADY_MEMBER
    status_code = 409


class DuplicateRequestError(TeamServiceError):
    """
    A pending invitation or application already exists for the (team, user) pair.

    ``existing_id`` is the id of the pending request so callers can point the
    user at it instead of creating another one.
    """
    kind = ErrorKind.DUPLICATE_REQUEST
    status_code = 409

    def __init__(self, message: str, existing_id: Optional[int] = None):
        super().__init__(message)
        self.existing_id = existing_id

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["existing_id"] = self.existing_id
        return data


class InvalidStateError(TeamServiceError):
    kind = ErrorKind.INVALID_STATE
    status_code = 409


class OwnerProtectedError(TeamServiceError):
    kind = ErrorKind.OWNER_PROTECTED
    status_code = 403


class CannotLeaveAsOwnerError(OwnerProtectedError):
    """The owner tried to leave without transferring ownership."""


class ContentionError(TeamServiceError):
    kind = ErrorKind.CONTENTION
    status_code = 503


class InputValidationError(TeamServiceError):
    kind = ErrorKind.VALIDATION_ERROR
    status_code = 422


class ConsistencyError(RuntimeError):
    """
    Stored counters disagree with the membership ledger.

    Not part of the caller-facing taxonomy: it means a bug, and it is
    reported to Sentry and surfaced as a 500.
    """
