from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel

from split_ledger.models.ledger_entry import LedgerEntry
from split_ledger.services.inventory_query_service import BucketPage


def _money(value) -> Optional[float]:
    return float(value) if value is not None else None


class LedgerEntryDTO(BaseModel):
    entry_id: str
    order_id: Optional[str]
    bucket_key: str
    item_kind: str
    product_code: str
    quantity: float
    secondary_quantity: Optional[float]
    order_transaction_type: Optional[str]
    order_payment_type: Optional[str]
    declared_price_per_unit: Optional[float]
    declared_price_per_kg: Optional[float]
    actual_price_per_unit: Optional[float]
    actual_price_per_kg: Optional[float]
    created_at: datetime

    @classmethod
    def from_orm_model(cls, entry: LedgerEntry) -> "LedgerEntryDTO":
        return cls(
            entry_id=entry.entry_id,
            order_id=entry.order_id,
            bucket_key=entry.bucket_key,
            item_kind=entry.item_kind.value,
            product_code=entry.product_code,
            quantity=entry.quantity,
            secondary_quantity=entry.secondary_quantity,
            order_transaction_type=entry.order_transaction_type,
            order_payment_type=entry.order_payment_type,
            declared_price_per_unit=_money(entry.declared_price_per_unit),
            declared_price_per_kg=_money(entry.declared_price_per_kg),
            actual_price_per_unit=_money(entry.actual_price_per_unit),
            actual_price_per_kg=_money(entry.actual_price_per_kg),
            created_at=entry.created_at,
        )


class BucketSummaryDTO(BaseModel):
    bucket_key: str
    total_quantity: float
    total_secondary_quantity: Optional[float]
    entry_count: int


class BucketPageDTO(BaseModel):
    page: int
    limit: int
    total: int
    items: List[BucketSummaryDTO]

    @classmethod
    def from_domain_model(cls, page: BucketPage) -> "BucketPageDTO":
        return cls(
            page=page.page,
            limit=page.limit,
            total=page.total,
            items=[
                BucketSummaryDTO(
                    bucket_key=b.bucket_key,
                    total_quantity=b.total_quantity,
                    total_secondary_quantity=b.total_secondary_quantity,
                    entry_count=b.entry_count,
                )
                for b in page.items
            ],
        )
