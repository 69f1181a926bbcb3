# split_ledger/models/ledger_entry.py
from typing import Optional, Union
from decimal import Decimal
from datetime import datetime, timezone

from sqlalchemy import String, Float, Numeric, DateTime, Enum, Index, event, func
from sqlalchemy.orm import Mapped, mapped_column

from split_ledger.db.base import Base
from split_ledger.db.enums import ItemKind
from split_ledger.errors import ImmutableRecordError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_product_code(product_code: str) -> str:
    return " ".join(str(product_code).split()).upper()


def normalize_bucket_key(raw_key: str) -> str:
    '''
    Case and whitespace insensitive form of a bucket key.
    "  p-600 -  12.5 " and "P-600 - 12.5" normalize to the same key.
    '''
    return " ".join(str(raw_key).split()).upper()


def make_bucket_key(product_code: str, actual_price_per_unit: Optional[Union[Decimal, float, str]]) -> str:
    '''
    Build the bucket key of a (product_code, acquisition price) batch.
    Format: "<PRODUCT_CODE> - <price>", or "<PRODUCT_CODE>" when the price is unknown.
    '''
    code = normalize_product_code(product_code)
    if actual_price_per_unit is None:
        return code
    price = Decimal(str(actual_price_per_unit)).normalize()
    return normalize_bucket_key(f"{code} - {format(price, 'f')}")


class LedgerEntry(Base):
    """
    Immutable, signed quantity record. The only unit of mutation in the inventory model.

    Invariants:
    - Never updated or deleted; corrections are new offsetting entries
    - quantity > 0 adds to the bucket, quantity < 0 draws it down
    - Split-written rows never carry secondary_quantity
    """
    __tablename__ = "ledger_entries"

    # =========
    # Identity
    # =========
    entry_id :Mapped[str] = mapped_column(String(36), primary_key=True, comment="Ledger entry UUID")

    order_id :Mapped[Optional[str]] = mapped_column(String(64), nullable=True, comment="Owning order reference")

    bucket_key :Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Normalized (product_code, acquisition price) grouping key",
    )

    item_kind :Mapped[ItemKind] = mapped_column(
        Enum(ItemKind, name="item_kind"),
        nullable=False,
        comment="Only the dimensioned kind (product) participates in splitting",
    )

    product_code :Mapped[str] = mapped_column(String(100), nullable=False, comment="Variant code, upper case")

    # =========
    # Quantities
    # =========
    quantity :Mapped[float] = mapped_column(
        Float,
        nullable=False,
        comment="Signed area quantity; negative for consumption",
    )

    secondary_quantity :Mapped[Optional[float]] = mapped_column(
        Float,
        nullable=True,
        comment="Mass in kg; not mutated by splits",
    )

    # =========
    # Order metadata (carried verbatim on split)
    # =========
    order_transaction_type :Mapped[Optional[str]] = mapped_column(String(50), nullable=True, comment="Purchase / Sale / ...")
    order_payment_type :Mapped[Optional[str]] = mapped_column(String(50), nullable=True, comment="Credit / Cash / ...")

    # =========
    # Pricing (carried verbatim on split)
    # =========
    declared_price_per_unit :Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 5), nullable=True, comment="Declared price per area unit")
    declared_price_per_kg :Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 5), nullable=True, comment="Declared price per kg")
    actual_price_per_unit :Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 5), nullable=True, comment="Actual acquisition price per area unit")
    actual_price_per_kg :Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 5), nullable=True, comment="Actual acquisition price per kg")

    # =========
    # Timestamps
    # =========
    created_at :Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        nullable=False,
        comment="Creation timestamp",
    )

    updated_at :Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        nullable=False,
        comment="Equal to created_at; rows are never updated",
    )

    __table_args__ = (
        Index("idx_ledger_bucket_kind", "bucket_key", "item_kind"),
        Index("idx_ledger_product_code", "product_code"),
    )

    def __repr__(self) -> str:
        return (
            f"<LedgerEntry id={self.entry_id} "
            f"bucket={self.bucket_key} "
            f"quantity={self.quantity}>"
        )


@event.listens_for(LedgerEntry, "before_update")
def _reject_ledger_update(mapper, connection, target):
    raise ImmutableRecordError(
        f"Ledger entry {target.entry_id} is immutable; write an offsetting entry instead"
    )


@event.listens_for(LedgerEntry, "before_delete")
def _reject_ledger_delete(mapper, connection, target):
    raise ImmutableRecordError(
        f"Ledger entry {target.entry_id} cannot be deleted"
    )
