from typing import Optional
from sqlalchemy.orm import Session

from split_ledger.schemas.tool_result import ToolResult
from split_ledger.schemas.dto.eligibility_dto import EligibilityDTO
from split_ledger.services.eligibility_service import EligibilityService

from split_ledger.schemas.tool_spec import ToolSpec
from split_ledger.schemas.risk_profile import ToolRiskProfile
from split_ledger.tools.registry import tool_registry
from split_ledger.tools.tool_errors import error_result


def check_split_eligibility_tool(
    *,
    db: Session,
    entry_id: Optional[str] = None,
    bucket_key: Optional[str] = None,
    product_code: Optional[str] = None,
) -> ToolResult:
    """
    Tool: check_split_eligibility

    Side effects: none.

    Returns the bucket's available area and the master product's attributes.
    eligible is False when the available area is not positive.
    """
    service = EligibilityService(db)
    try:
        result = service.check_eligibility(entry_id=entry_id, bucket_key=bucket_key, product_code=product_code)
        dto = EligibilityDTO.from_domain_model(result)
    except Exception as e:
        db.rollback()
        return error_result(e)

    if dto.eligible:
        explain = (
            f"Bucket {dto.bucket_key} has {dto.available_quantity} available on a master width of {dto.width}. "
            "Next step: resolve split options for the first row."
        )
    else:
        explain = f"Bucket {dto.bucket_key} has no available quantity and cannot be split."
    return ToolResult(ok=True, data=dto.model_dump(), explanation=explain)


spec = ToolSpec(
    name="check_split_eligibility",
    func=check_split_eligibility_tool,
    description="Check whether an inventory bucket can be split and report its available area and attributes",
    input_schema={"db": "Session",
                  "entry_id": "Optional[str]",
                  "bucket_key": "Optional[str]",
                  "product_code": "Optional[str]"},
    output_schema="ToolResult",
    risk_profile=ToolRiskProfile(),
    example_usage='check_split_eligibility(db=db, bucket_key="P_1000 - 2.5")',
)

tool_registry.register(spec)
