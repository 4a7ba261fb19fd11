"""Domain error taxonomy.

Every failure a caller can observe is a PartyError subclass carrying the
HTTP status it maps to and a stable machine-readable code. The server
renders them all through one exception handler.
"""

from enum import StrEnum
from http import HTTPStatus


class ErrorCode(StrEnum):
    INVALID_REQUEST = "invalid_request"
    AUTHENTICATION_REQUIRED = "authentication_required"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    PARTY_ENDED = "party_ended"
    QUOTA_EXCEEDED = "quota_exceeded"


class PartyError(Exception):
    status_code: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR
    code: ErrorCode = ErrorCode.INVALID_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(PartyError):
    """Malformed or missing input."""

    status_code = HTTPStatus.BAD_REQUEST
    code = ErrorCode.INVALID_REQUEST


class AuthenticationError(PartyError):
    """Missing or unknown bearer token."""

    status_code = HTTPStatus.UNAUTHORIZED
    code = ErrorCode.AUTHENTICATION_REQUIRED


class AuthorizationError(PartyError):
    """Valid session with insufficient role, or wrong device access code."""

    status_code = HTTPStatus.FORBIDDEN
    code = ErrorCode.FORBIDDEN


class NotFoundError(PartyError):
    status_code = HTTPStatus.NOT_FOUND
    code = ErrorCode.NOT_FOUND


class ConflictError(PartyError):
    """Operation is not valid in the party's current state."""

    status_code = HTTPStatus.CONFLICT
    code = ErrorCode.CONFLICT


class GoneError(PartyError):
    """The party has ended and no longer accepts joiners."""

    status_code = HTTPStatus.GONE
    code = ErrorCode.PARTY_ENDED


class QuotaExceededError(PartyError):
    status_code = HTTPStatus.TOO_MANY_REQUESTS
    code = ErrorCode.QUOTA_EXCEEDED
