"""
Domain errors for the board service.

Every failure the ordering engine can report is a ``BoardServiceError`` with an
``ErrorType`` and the HTTP status the API answers with. Routers never build
error responses by hand; the exception handlers in ``taskboard.main`` render
these into the ``{"success": false, "message": ...}`` envelope.
"""

from enum import Enum
from typing import Any, Dict, Optional

# Shared by Forbidden and NotFound on boards so non-members cannot probe ids
BOARD_ACCESS_MESSAGE = "Board not found or you dont have permission"


class ErrorType(Enum):
    """Standard error types"""
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    INVALID_PERMUTATION = "invalid_permutation"
    INVALID_TARGET = "invalid_target"
    INVALID_ORDER = "invalid_order"
    TRANSACTION_CONFLICT = "transaction_conflict"
    VALIDATION = "validation"
    INTERNAL_ERROR = "internal_error"


class BoardServiceError(Exception):
    """Base exception for the board service"""

    error_type = ErrorType.INTERNAL_ERROR
    status_code = 500

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class Forbidden(BoardServiceError):
    """The acting user lacks the role or ownership the operation needs.

    Answered exactly like ``NotFound`` so that board existence is not leaked.
    """

    error_type = ErrorType.FORBIDDEN
    status_code = 404

    def __init__(self, message: str = BOARD_ACCESS_MESSAGE, **kwargs):
        super().__init__(message, **kwargs)


class NotFound(BoardServiceError):
    error_type = ErrorType.NOT_FOUND
    status_code = 404


class InvalidPermutation(BoardServiceError):
    error_type = ErrorType.INVALID_PERMUTATION
    status_code = 400


class InvalidTarget(BoardServiceError):
    error_type = ErrorType.INVALID_TARGET
    status_code = 400


class InvalidOrder(BoardServiceError):
    error_type = ErrorType.INVALID_ORDER
    status_code = 400


class TransactionConflict(BoardServiceError):
    """Concurrent modification; retry from a fresh read, never with stale indices."""

    error_type = ErrorType.TRANSACTION_CONFLICT
    status_code = 409


class ValidationFailed(BoardServiceError):
    error_type = ErrorType.VALIDATION
    status_code = 400
