# split_ledger/tools/tool_errors.py
from sqlalchemy.exc import SQLAlchemyError

from split_ledger.errors import SplitLedgerError
from split_ledger.schemas.error_type import ErrorType
from split_ledger.schemas.tool_result import ToolResult

# next-step hints handed back with each failure kind
_EXPLANATIONS = {
    ErrorType.VALIDATION_ERROR: "Input is invalid. Check the error message and details, fix the plan and retry.",
    ErrorType.NOT_FOUND: "A referenced entry, bucket or product code does not exist. Re-check the identifiers.",
    ErrorType.NOT_ELIGIBLE: "The bucket holds no product entry with a width, so it cannot be split.",
    ErrorType.CONFLICT_ERROR: "A concurrent change won the race. Nothing was written; retry the same call.",
    ErrorType.DEADLINE_EXCEEDED: "The deadline passed before commit. Nothing was written; retry with more time.",
    ErrorType.INTERNAL_ERROR: "An internal invariant failed and nothing was written. Escalate; the full details are in the server log.",
    ErrorType.SYSTEM_ERROR: "Unexpected system error. Retry once; if it fails again, escalate.",
}


def error_result(e: Exception) -> ToolResult:
    '''
    Map an exception raised by a service to a failed ToolResult.
    Callers roll back before calling this.
    '''
    if isinstance(e, SplitLedgerError):
        return ToolResult(
            ok=False,
            error_type=e.error_type,
            error_message=e.public_message,
            error_details=e.public_details or None,
            explanation=_EXPLANATIONS.get(e.error_type),
            side_effect=False,
            irreversible=False,
            retryable=e.retryable,
        )
    if isinstance(e, SQLAlchemyError):
        return ToolResult(
            ok=False,
            error_type=ErrorType.SYSTEM_ERROR,
            error_message=str(e),
            explanation="Database error occurred. Retry may work; if repeated, escalate.",
            retryable=True,
        )
    return ToolResult(
        ok=False,
        error_type=ErrorType.SYSTEM_ERROR,
        error_message=str(e),
        explanation=_EXPLANATIONS[ErrorType.SYSTEM_ERROR],
    )
