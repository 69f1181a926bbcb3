from typing import List
from pydantic import BaseModel

from split_ledger.services.split_option_service import SplitOption


class SplitOptionDTO(BaseModel):
    product_code: str
    width: int
    description: str


class SplitOptionsDTO(BaseModel):
    options: List[SplitOptionDTO]

    @classmethod
    def from_domain_model(cls, options: List[SplitOption]) -> "SplitOptionsDTO":
        return cls(
            options=[
                SplitOptionDTO(product_code=o.product_code, width=o.width, description=o.description)
                for o in options
            ]
        )
