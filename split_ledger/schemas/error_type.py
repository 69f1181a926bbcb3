from enum import Enum

class ErrorType(str, Enum):
    '''
    Machine-distinguishable error kinds surfaced by the split engine.

    VALIDATION_ERROR: malformed or out-of-policy input (bad shape, area exceeds available,
        attribute mismatch, width-sum mismatch, degenerate first row). Not retried.
    NOT_FOUND: referenced entry, bucket or product code does not exist. Not retried.
    NOT_ELIGIBLE: the bucket exists but has no dimensioned entry to split.
    CONFLICT_ERROR: the commit lost a race with a concurrent transaction. Retryable.
    DEADLINE_EXCEEDED: the caller's deadline passed before commit; nothing was written.
    INTERNAL_ERROR: an invariant the engine itself guarantees was violated.
    TOOL_NOT_ALLOWED: the tool is not on the caller's allowlist.
    SYSTEM_ERROR: unclassified failure in the tool layer.
    '''
    VALIDATION_ERROR = "ValidationError"
    NOT_FOUND = "NotFound"
    NOT_ELIGIBLE = "NotEligible"

    CONFLICT_ERROR = "ConflictError"
    DEADLINE_EXCEEDED = "DeadlineExceeded"

    INTERNAL_ERROR = "InternalError"

    TOOL_NOT_ALLOWED = "ToolNotAllowed"
    SYSTEM_ERROR = "SystemError"
