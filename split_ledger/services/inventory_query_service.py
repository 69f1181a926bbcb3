from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Union

from sqlalchemy.orm import Session

from split_ledger.constants import (
    DEFAULT_PAGE,
    DEFAULT_LIMIT,
    MAX_LIMIT,
    LIST_MODE_ALL,
    LIST_MODE_AVAILABLE,
    SYSTEM_OPERATOR,
)
from split_ledger.db.enums import AuditEntityType, ItemKind
from split_ledger.errors import ValidationError, NotFoundError
from split_ledger.models.ledger_entry import LedgerEntry, make_bucket_key, normalize_product_code
from split_ledger.repositories.ledger_repository import ILedgerRepository, LedgerRepository
from split_ledger.repositories.catalog_repository import ICatalogRepository, CatalogRepository
from split_ledger.services.audit_log_service import AuditLogService


@dataclass
class BucketSummary:
    bucket_key: str
    total_quantity: float
    total_secondary_quantity: Optional[float]
    entry_count: int


@dataclass
class BucketPage:
    page: int
    limit: int
    total: int
    items: List[BucketSummary] = field(default_factory=list)


class InventoryQueryService:
    """
    Read model over the ledger (bucket totals, bucket history) plus the receipt write path.
    """

    def __init__(
        self,
        db: Session,
        audit_log_service: AuditLogService,
        ledger_repository: Optional[ILedgerRepository] = None,
        catalog_repository: Optional[ICatalogRepository] = None,
    ):
        self.db = db
        self.audit_log_service = audit_log_service
        self.ledger = ledger_repository or LedgerRepository(db)
        self.catalog = catalog_repository or CatalogRepository(db)

    def list_buckets(
        self,
        *,
        mode: str = LIST_MODE_ALL,
        item_kind: Optional[str] = None,
        order_id: Optional[str] = None,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_LIMIT,
    ) -> BucketPage:
        '''
        Grouped totals per bucket.

        :param mode: "all", or "available" to keep buckets whose total is > 0
        :param item_kind: "product" / "hardware" filter
        :param order_id: optional order filter
        :param page: 1-based page number
        :param limit: page size, capped at MAX_LIMIT
        '''
        if mode not in (LIST_MODE_ALL, LIST_MODE_AVAILABLE):
            raise ValidationError('mode must be "available" or "all"', details={"mode": mode})
        kind = None
        if item_kind:
            try:
                kind = ItemKind(item_kind.strip().lower())
            except ValueError:
                raise ValidationError(
                    'item_kind must be either "product" or "hardware"',
                    details={"item_kind": item_kind},
                )
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive integers")
        limit = min(limit, MAX_LIMIT)

        total, rows = self.ledger.list_bucket_aggregates(
            only_available=(mode == LIST_MODE_AVAILABLE),
            item_kind=kind,
            order_id=order_id,
            offset=(page - 1) * limit,
            limit=limit,
        )
        return BucketPage(
            page=page,
            limit=limit,
            total=total,
            items=[BucketSummary(*row) for row in rows],
        )

    def list_bucket_entries(self, bucket_key: str) -> List[LedgerEntry]:
        entries = self.ledger.list_bucket_entries(bucket_key)
        if not entries:
            raise NotFoundError(f"Bucket {bucket_key} not found", details={"bucket_key": bucket_key})
        return entries

    def record_receipt(
        self,
        *,
        product_code: str,
        quantity: float,
        item_kind: ItemKind = ItemKind.product,
        order_id: Optional[str] = None,
        secondary_quantity: Optional[float] = None,
        order_transaction_type: Optional[str] = "Purchase",
        order_payment_type: Optional[str] = "Credit",
        declared_price_per_unit: Optional[Union[Decimal, str]] = None,
        declared_price_per_kg: Optional[Union[Decimal, str]] = None,
        actual_price_per_unit: Optional[Union[Decimal, str]] = None,
        actual_price_per_kg: Optional[Union[Decimal, str]] = None,
        operator_id: str = SYSTEM_OPERATOR,
    ) -> LedgerEntry:
        '''
        Append a positive receipt entry. The bucket key derives from product code and actual price.
        Flushes only; the caller commits.
        '''
        if quantity is None or quantity <= 0:
            raise ValidationError("Receipt quantity must be positive", details={"quantity": quantity})
        code = normalize_product_code(product_code)
        if item_kind == ItemKind.product and self.catalog.get_product_attributes(code) is None:
            raise NotFoundError(f"Product {code} not found in catalog", details={"product_code": code})

        entry = self.ledger.insert_ledger_entry(
            LedgerEntry(
                order_id=order_id,
                bucket_key=make_bucket_key(code, actual_price_per_unit),
                item_kind=item_kind,
                product_code=code,
                quantity=float(quantity),
                secondary_quantity=secondary_quantity,
                order_transaction_type=order_transaction_type,
                order_payment_type=order_payment_type,
                declared_price_per_unit=_to_decimal(declared_price_per_unit),
                declared_price_per_kg=_to_decimal(declared_price_per_kg),
                actual_price_per_unit=_to_decimal(actual_price_per_unit),
                actual_price_per_kg=_to_decimal(actual_price_per_kg),
            )
        )
        self.audit_log_service.record_create(
            order_id=order_id,
            entity_type=AuditEntityType.LedgerEntry,
            entity_id=entry.entry_id,
            operator_id=operator_id,
            after_value={"bucket_key": entry.bucket_key, "product_code": code, "quantity": entry.quantity},
        )
        return entry


def _to_decimal(value) -> Optional[Decimal]:
    if value is None:
        return None
    return value if isinstance(value, Decimal) else Decimal(str(value))
