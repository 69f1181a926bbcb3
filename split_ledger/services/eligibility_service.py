from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from split_ledger.db.enums import ItemKind
from split_ledger.errors import ValidationError, NotFoundError, NotEligibleError
from split_ledger.models.ledger_entry import LedgerEntry
from split_ledger.models.product_attributes import ProductAttributes
from split_ledger.repositories.ledger_repository import ILedgerRepository, LedgerRepository
from split_ledger.repositories.catalog_repository import ICatalogRepository, CatalogRepository


@dataclass
class SplitSource:
    """A bucket resolved to its representative dimensioned entry and catalog row."""
    entry: LedgerEntry
    attributes: ProductAttributes

    @property
    def bucket_key(self) -> str:
        return self.entry.bucket_key


@dataclass
class EligibilityResult:
    eligible: bool
    available_quantity: float
    product_code: str
    width: int
    vendor_id: str
    adhesive_type: str
    basis_weight: Decimal
    material: str
    representative_entry_id: str
    bucket_key: str


class EligibilityService:
    """
    Decides whether an inventory bucket can be split.

    A bucket can be addressed by any one of its entry ids or by its bucket key;
    both paths resolve to the same representative entry shape. Read-only.
    """

    def __init__(
        self,
        db: Session,
        ledger_repository: Optional[ILedgerRepository] = None,
        catalog_repository: Optional[ICatalogRepository] = None,
    ):
        self.db = db
        self.ledger = ledger_repository or LedgerRepository(db)
        self.catalog = catalog_repository or CatalogRepository(db)

    def resolve_source(
        self,
        *,
        entry_id: Optional[str] = None,
        bucket_key: Optional[str] = None,
        product_code: Optional[str] = None,
    ) -> SplitSource:
        '''
        Resolve a bucket identifier to its dimensioned representative entry and catalog row.

        :param entry_id: any product entry of the bucket (takes precedence)
        :param bucket_key: bucket key, case/whitespace insensitive
        :param product_code: optional narrowing of the bucket_key path
        :raises ValidationError: neither identifier supplied
        :raises NotFoundError: entry, bucket or catalog row missing
        :raises NotEligibleError: the bucket has no dimensioned entry
        '''
        entry_id = (entry_id or "").strip() or None
        bucket_key = (bucket_key or "").strip() or None

        if entry_id:
            entry = self.ledger.get_entry(entry_id)
            if entry is None:
                raise NotFoundError(
                    f"Inventory entry {entry_id} not found",
                    details={"entry_id": entry_id},
                )
            if entry.item_kind != ItemKind.product:
                raise NotEligibleError(
                    f"Inventory entry {entry_id} is not a product type",
                    details={"entry_id": entry_id, "item_kind": entry.item_kind.value},
                )
            # any entry of the bucket resolves to the bucket's own representative
            entry = self.ledger.get_representative_entry(entry.bucket_key, product_code=entry.product_code)
        elif bucket_key:
            entry = self.ledger.get_representative_entry(bucket_key, product_code=product_code)
            if entry is None:
                details = {"bucket_key": bucket_key}
                if product_code:
                    details["product_code"] = product_code
                if self.ledger.bucket_exists(bucket_key, product_code=product_code):
                    raise NotEligibleError(
                        f"Bucket {bucket_key} has no product type entry",
                        details=details,
                    )
                raise NotFoundError(f"Bucket {bucket_key} not found", details=details)
        else:
            raise ValidationError("Either entry_id or bucket_key must be provided")

        attributes = self.catalog.get_product_attributes(entry.product_code)
        if attributes is None:
            raise NotFoundError(
                f"Product {entry.product_code} not found in catalog",
                details={"product_code": entry.product_code},
            )
        return SplitSource(entry=entry, attributes=attributes)

    def check_eligibility(
        self,
        *,
        entry_id: Optional[str] = None,
        bucket_key: Optional[str] = None,
        product_code: Optional[str] = None,
    ) -> EligibilityResult:
        '''
        Eligible iff the bucket's aggregate dimensioned quantity is > 0.
        '''
        source = self.resolve_source(entry_id=entry_id, bucket_key=bucket_key, product_code=product_code)
        available = self.ledger.get_bucket_aggregate(source.bucket_key)
        attrs = source.attributes
        return EligibilityResult(
            eligible=available > 0,
            available_quantity=available,
            product_code=attrs.product_code,
            width=attrs.width,
            vendor_id=attrs.vendor_id,
            adhesive_type=attrs.adhesive_type,
            basis_weight=attrs.basis_weight,
            material=attrs.material,
            representative_entry_id=source.entry.entry_id,
            bucket_key=source.bucket_key,
        )
