from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.orm import Session

from split_ledger.errors import ValidationError, NotFoundError
from split_ledger.repositories.catalog_repository import ICatalogRepository, CatalogRepository


@dataclass
class SplitOption:
    product_code: str
    width: int
    description: str


class SplitOptionService:
    """
    Lists the catalog variants a split row may use.
    Called once per row while a plan is assembled; read-only and safe to call speculatively.
    """

    def __init__(self, db: Session, catalog_repository: Optional[ICatalogRepository] = None):
        self.db = db
        self.catalog = catalog_repository or CatalogRepository(db)

    def resolve_split_options(
        self,
        *,
        product_code: str,
        remaining_width: int,
        is_first_row: bool = False,
    ) -> List[SplitOption]:
        '''
        Candidates share the original's vendor, adhesive type, basis weight and material,
        and fit in remaining_width. On the first row the original width itself is excluded,
        so at least one real division happens.

        :param product_code: original (master) product code
        :param remaining_width: width still unallocated for this row, > 0
        :param is_first_row: whether this is row 0 of the plan
        :return: options ordered by ascending width
        '''
        if not product_code or not str(product_code).strip():
            raise ValidationError("product_code is required and cannot be blank")
        if isinstance(remaining_width, bool) or not isinstance(remaining_width, int) or remaining_width <= 0:
            raise ValidationError(
                "remaining_width must be a positive integer",
                details={"remaining_width": remaining_width},
            )

        original = self.catalog.get_product_attributes(product_code)
        if original is None:
            raise NotFoundError(
                "Original product code not found",
                details={"product_code": product_code},
            )

        variants = self.catalog.find_compatible_variants(
            original,
            max_width=remaining_width,
            below_width=original.width if is_first_row else None,
        )
        return [
            SplitOption(
                product_code=v.product_code,
                width=v.width,
                description=v.description or "",
            )
            for v in variants
        ]
