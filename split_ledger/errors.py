# split_ledger/errors.py
from typing import Any, Dict, Optional

from split_ledger.schemas.error_type import ErrorType

INTERNAL_ERROR_MESSAGE = "Internal error; nothing was written"


class SplitLedgerError(Exception):
    """
    Base of every error the split engine raises on purpose.
    Carries a machine-readable kind, a human-readable message and optional details.
    """
    error_type: ErrorType = ErrorType.INTERNAL_ERROR
    http_status: int = 500
    retryable: bool = False

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def public_message(self) -> str:
        return self.message

    @property
    def public_details(self) -> Dict[str, Any]:
        return self.details

    def to_dict(self) -> Dict[str, Any]:
        '''Caller-facing payload; see InternalError for what is withheld.'''
        payload: Dict[str, Any] = {
            "error": self.error_type.value,
            "message": self.public_message,
        }
        if self.public_details:
            payload["details"] = self.public_details
        return payload


class ValidationError(SplitLedgerError):
    error_type = ErrorType.VALIDATION_ERROR
    http_status = 400


class NotFoundError(SplitLedgerError):
    error_type = ErrorType.NOT_FOUND
    http_status = 404


class NotEligibleError(NotFoundError):
    """The bucket has no entry of the dimensioned kind."""
    error_type = ErrorType.NOT_ELIGIBLE


class ConflictError(SplitLedgerError):
    error_type = ErrorType.CONFLICT_ERROR
    http_status = 409
    retryable = True


class DeadlineExceededError(SplitLedgerError):
    error_type = ErrorType.DEADLINE_EXCEEDED
    http_status = 504
    retryable = True


class InternalError(SplitLedgerError):
    """
    An invariant the engine guarantees was violated. Logged with full details by the
    service; callers only see a fixed message.
    """
    error_type = ErrorType.INTERNAL_ERROR
    http_status = 500

    @property
    def public_message(self) -> str:
        return INTERNAL_ERROR_MESSAGE

    @property
    def public_details(self) -> Dict[str, Any]:
        return {}


class ImmutableRecordError(InternalError):
    """Raised when a flush tries to UPDATE or DELETE an append-only row."""
