from typing import List, Optional
from sqlalchemy.orm import Session

from split_ledger.constants import SYSTEM_OPERATOR
from split_ledger.schemas.tool_result import ToolResult
from split_ledger.schemas.dto.split_result_dto import SplitResultDTO
from split_ledger.services.audit_log_service import AuditLogService
from split_ledger.services.split_execution_service import SplitExecutionService

from split_ledger.schemas.tool_spec import ToolSpec
from split_ledger.schemas.risk_profile import ToolRiskProfile
from split_ledger.tools.registry import tool_registry
from split_ledger.tools.tool_errors import error_result


def execute_split_tool(
    *,
    db: Session,
    splits: List[str],
    entry_id: Optional[str] = None,
    bucket_key: Optional[str] = None,
    requested_area: Optional[float] = None,
    requested_length: Optional[float] = None,
    operator_id: str = SYSTEM_OPERATOR,
    deadline: Optional[float] = None,
) -> ToolResult:
    """
    Tool: execute_split

    Side effects:
    - Appends one consuming entry to the source bucket
    - Appends one producing entry per plan row
    - Writes audit log rows

    Ledger entries are immutable: a committed split can only be offset by new entries.
    The service commits or rolls back itself; the tool does not commit again.
    """
    audit = AuditLogService(db)
    service = SplitExecutionService(db=db, audit_log_service=audit)
    try:
        result = service.execute_split(
            splits=splits,
            entry_id=entry_id,
            bucket_key=bucket_key,
            requested_area=requested_area,
            requested_length=requested_length,
            operator_id=operator_id,
            deadline=deadline,
        )
    except Exception as e:
        db.rollback()
        return error_result(e)

    dto = SplitResultDTO.from_domain_model(result)
    return ToolResult(
        ok=True,
        data=dto.model_dump(),
        explanation=(
            f"Split committed: {dto.requested_area} consumed from {dto.source_bucket_key} "
            f"into {len(dto.breakdown)} row(s). The entries are permanent."
        ),
        side_effect=True,
        irreversible=True,
        audit_ref_id=dto.audit_ref_id,
    )


spec = ToolSpec(
    name="execute_split",
    func=execute_split_tool,
    description="Consume area from a bucket and append one narrower product entry per plan row",
    input_schema={"db": "Session",
                  "splits": "List[str]",
                  "entry_id": "Optional[str]",
                  "bucket_key": "Optional[str]",
                  "requested_area": "Optional[float]",
                  "requested_length": "Optional[float]",
                  "operator_id": "str",
                  "deadline": "Optional[float]"},
    output_schema="ToolResult",
    risk_profile=ToolRiskProfile(
        modifies_persistent_data=True,
        irreversible=True,
        deletes_data=False,
        affects_multiple_records=True,
        require_human_auth=False,
    ),
    example_usage='execute_split(db=db, entry_id="...", requested_area=40, splits=["P_600", "P_400"])',
)

tool_registry.register(spec)
