from typing import List, Optional
from pydantic import BaseModel

from split_ledger.services.split_execution_service import SplitResult


class SplitRowDTO(BaseModel):
    entry_id: str
    product_code: str
    width: int
    allocated_area: float


class SplitResultDTO(BaseModel):
    consumed_entry_id: str
    source_bucket_key: str
    requested_area: float
    requested_length: Optional[float] = None
    original_width: int
    breakdown: List[SplitRowDTO]
    audit_ref_id: Optional[str] = None

    @classmethod
    def from_domain_model(cls, result: SplitResult) -> "SplitResultDTO":
        return cls(
            consumed_entry_id=result.consumed_entry_id,
            source_bucket_key=result.source_bucket_key,
            requested_area=result.requested_area,
            requested_length=result.requested_length,
            original_width=result.original_width,
            breakdown=[
                SplitRowDTO(
                    entry_id=row.entry_id,
                    product_code=row.product_code,
                    width=row.width,
                    allocated_area=row.allocated_area,
                )
                for row in result.breakdown
            ],
            audit_ref_id=result.audit_ref_id,
        )
