from sqlalchemy.orm import Session

from split_ledger.schemas.tool_result import ToolResult
from split_ledger.schemas.dto.split_option_dto import SplitOptionsDTO
from split_ledger.services.split_option_service import SplitOptionService

from split_ledger.schemas.tool_spec import ToolSpec
from split_ledger.schemas.risk_profile import ToolRiskProfile
from split_ledger.tools.registry import tool_registry
from split_ledger.tools.tool_errors import error_result


def resolve_split_options_tool(
    *,
    db: Session,
    product_code: str,
    remaining_width: int,
    is_first_row: bool = False,
) -> ToolResult:
    """
    Tool: resolve_split_options

    Side effects: none. Call once per row while building a plan.
    """
    service = SplitOptionService(db)
    try:
        options = service.resolve_split_options(
            product_code=product_code,
            remaining_width=remaining_width,
            is_first_row=is_first_row,
        )
    except Exception as e:
        db.rollback()
        return error_result(e)

    dto = SplitOptionsDTO.from_domain_model(options)
    if options:
        explain = "Pick one option for this row, subtract its width from remaining_width and repeat until it reaches 0."
    else:
        explain = "No compatible product fits the remaining width. Revise the previous rows."
    return ToolResult(ok=True, data=dto.model_dump(), explanation=explain)


spec = ToolSpec(
    name="resolve_split_options",
    func=resolve_split_options_tool,
    description="List catalog products with matching attributes that fit the remaining width of a split row",
    input_schema={"db": "Session",
                  "product_code": "str",
                  "remaining_width": "int",
                  "is_first_row": "bool"},
    output_schema="ToolResult",
    risk_profile=ToolRiskProfile(),
    example_usage='resolve_split_options(db=db, product_code="P_1000", remaining_width=1000, is_first_row=True)',
)

tool_registry.register(spec)
