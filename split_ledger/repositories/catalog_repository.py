# split_ledger/repositories/catalog_repository.py
from typing import Dict, Iterable, List, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from split_ledger.models.ledger_entry import normalize_product_code
from split_ledger.models.product_attributes import ProductAttributes


class ICatalogRepository(Protocol):
    """Read-only lookup of product variants."""

    def get_product_attributes(self, product_code: str) -> Optional[ProductAttributes]: ...

    def get_many(self, product_codes: Iterable[str]) -> Dict[str, ProductAttributes]: ...

    def find_compatible_variants(
        self,
        original: ProductAttributes,
        *,
        max_width: int,
        below_width: Optional[int] = None,
    ) -> List[ProductAttributes]: ...


class CatalogRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_product_attributes(self, product_code: str) -> Optional[ProductAttributes]:
        return self.db.get(ProductAttributes, normalize_product_code(product_code))

    def get_many(self, product_codes: Iterable[str]) -> Dict[str, ProductAttributes]:
        '''
        Resolve several codes in one query.
        Codes missing from the catalog are simply absent from the returned dict.
        '''
        codes = {normalize_product_code(c) for c in product_codes}
        if not codes:
            return {}
        rows = self.db.execute(
            select(ProductAttributes).where(ProductAttributes.product_code.in_(codes))
        ).scalars().all()
        return {row.product_code: row for row in rows}

    def find_compatible_variants(
        self,
        original: ProductAttributes,
        *,
        max_width: int,
        below_width: Optional[int] = None,
    ) -> List[ProductAttributes]:
        '''
        Variants sharing the four matching attributes of `original`.

        :param max_width: inclusive upper bound on width
        :param below_width: optional exclusive upper bound on width
        :return: variants ordered by width, then product code
        '''
        stmt = select(ProductAttributes).where(
            ProductAttributes.vendor_id == original.vendor_id,
            ProductAttributes.adhesive_type == original.adhesive_type,
            ProductAttributes.basis_weight == original.basis_weight,
            ProductAttributes.material == original.material,
            ProductAttributes.width <= max_width,
            ProductAttributes.width > 0,
        )
        if below_width is not None:
            stmt = stmt.where(ProductAttributes.width < below_width)
        stmt = stmt.order_by(ProductAttributes.width.asc(), ProductAttributes.product_code.asc())
        return list(self.db.execute(stmt).scalars().all())

    def add_product(self, product: ProductAttributes) -> ProductAttributes:
        '''
        Insert a catalog row (seeding and tests). Flushes only; the caller commits.
        '''
        product.product_code = normalize_product_code(product.product_code)
        self.db.add(product)
        self.db.flush()
        return product
