# split_ledger/schemas/tool_result.py
from typing import Any, Dict, Optional
from pydantic import BaseModel
from split_ledger.schemas.error_type import ErrorType

class ToolResult(BaseModel):
    '''
    Structured result of one tool invocation.

    ok: whether the call did what it was asked to do
    error_type: machine-readable error kind when ok is False
    error_message: human-readable error, names the offending product code or quantity
    error_details: structured context of the error (widths, areas, codes)
    data: structured payload on success
    explanation: short next-step hint for the caller
    side_effect: whether persistent state changed
    irreversible: whether the change can only be corrected by new offsetting entries
    retryable: whether repeating the same call may succeed
    audit_ref_id: id to trace the change in the audit log
    '''
    ok: bool

    error_type: Optional[ErrorType] = None
    error_message: Optional[str] = None
    error_details: Optional[Dict[str, Any]] = None

    data: Optional[Dict[str, Any]] = None
    explanation: Optional[str] = None

    side_effect: bool = False
    irreversible: bool = False
    retryable: bool = False

    audit_ref_id: Optional[str] = None
