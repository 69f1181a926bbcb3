from pydantic import BaseModel

from split_ledger.services.eligibility_service import EligibilityResult


class EligibilityDTO(BaseModel):
    eligible: bool
    available_quantity: float
    product_code: str
    width: int
    vendor_id: str
    adhesive_type: str
    basis_weight: float
    material: str
    representative_entry_id: str
    bucket_key: str

    @classmethod
    def from_domain_model(cls, result: EligibilityResult) -> "EligibilityDTO":
        return cls(
            eligible=result.eligible,
            available_quantity=result.available_quantity,
            product_code=result.product_code,
            width=result.width,
            vendor_id=result.vendor_id,
            adhesive_type=result.adhesive_type,
            basis_weight=float(result.basis_weight),
            material=result.material,
            representative_entry_id=result.representative_entry_id,
            bucket_key=result.bucket_key,
        )
