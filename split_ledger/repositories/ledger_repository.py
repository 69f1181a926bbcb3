# split_ledger/repositories/ledger_repository.py
from typing import List, Optional, Protocol, Tuple
from uuid import uuid4

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from split_ledger.db.enums import ItemKind
from split_ledger.models.ledger_entry import LedgerEntry, normalize_bucket_key, normalize_product_code


BucketAggregateRow = Tuple[str, float, Optional[float], int]  # (bucket_key, total_quantity, total_secondary_quantity, entry_count)


class ILedgerRepository(Protocol):
    """
    Typed access to the append-only quantity ledger.
    Services depend on this contract rather than on ad hoc queries.
    """

    def get_entry(self, entry_id: str) -> Optional[LedgerEntry]: ...

    def bucket_exists(self, bucket_key: str, *, product_code: Optional[str] = None) -> bool: ...

    def get_representative_entry(
        self,
        bucket_key: str,
        *,
        item_kind: ItemKind = ItemKind.product,
        product_code: Optional[str] = None,
    ) -> Optional[LedgerEntry]: ...

    def get_bucket_aggregate(self, bucket_key: str, *, item_kind: ItemKind = ItemKind.product) -> float: ...

    def insert_ledger_entry(self, entry: LedgerEntry) -> LedgerEntry: ...

    def list_bucket_entries(self, bucket_key: str) -> List[LedgerEntry]: ...

    def list_bucket_aggregates(
        self,
        *,
        only_available: bool,
        item_kind: Optional[ItemKind],
        order_id: Optional[str],
        offset: int,
        limit: int,
    ) -> Tuple[int, List[BucketAggregateRow]]: ...


class LedgerRepository:
    """
    SQLAlchemy implementation of ILedgerRepository.
    Never issues UPDATE or DELETE; the only write path is insert_ledger_entry().
    """

    def __init__(self, db: Session):
        self.db = db

    # =========
    # Reads
    # =========
    def get_entry(self, entry_id: str) -> Optional[LedgerEntry]:
        return self.db.get(LedgerEntry, entry_id)

    def bucket_exists(self, bucket_key: str, *, product_code: Optional[str] = None) -> bool:
        stmt = select(func.count()).select_from(LedgerEntry).where(
            LedgerEntry.bucket_key == normalize_bucket_key(bucket_key)
        )
        if product_code:
            stmt = stmt.where(LedgerEntry.product_code == normalize_product_code(product_code))
        return (self.db.execute(stmt).scalar() or 0) > 0

    def get_representative_entry(
        self,
        bucket_key: str,
        *,
        item_kind: ItemKind = ItemKind.product,
        product_code: Optional[str] = None,
    ) -> Optional[LedgerEntry]:
        '''
        Earliest entry of the bucket with the given kind.
        Ordered by (created_at, entry_id) so repeated calls return the same row.
        '''
        stmt = select(LedgerEntry).where(
            LedgerEntry.bucket_key == normalize_bucket_key(bucket_key),
            LedgerEntry.item_kind == item_kind,
        )
        if product_code:
            stmt = stmt.where(LedgerEntry.product_code == normalize_product_code(product_code))
        stmt = stmt.order_by(LedgerEntry.created_at.asc(), LedgerEntry.entry_id.asc()).limit(1)
        return self.db.execute(stmt).scalars().first()

    def get_bucket_aggregate(self, bucket_key: str, *, item_kind: ItemKind = ItemKind.product) -> float:
        '''
        Sum of quantity over the bucket's entries of the given kind.
        Returns 0.0 for a bucket with no rows.
        '''
        total = self.db.execute(
            select(func.sum(LedgerEntry.quantity)).where(
                LedgerEntry.bucket_key == normalize_bucket_key(bucket_key),
                LedgerEntry.item_kind == item_kind,
            )
        ).scalar()
        # SUM over zero rows is NULL
        if total is None:
            return 0.0
        return float(total)

    def list_bucket_entries(self, bucket_key: str) -> List[LedgerEntry]:
        stmt = (
            select(LedgerEntry)
            .where(LedgerEntry.bucket_key == normalize_bucket_key(bucket_key))
            .order_by(LedgerEntry.created_at.asc(), LedgerEntry.entry_id.asc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def list_bucket_aggregates(
        self,
        *,
        only_available: bool,
        item_kind: Optional[ItemKind],
        order_id: Optional[str],
        offset: int,
        limit: int,
    ) -> Tuple[int, List[BucketAggregateRow]]:
        '''
        Grouped totals per bucket.
        Rows are never filtered by their own quantity: a bucket is "available" only
        through its aggregated sum, since removals are negative rows.

        :return: (total number of groups, page of (bucket_key, total_quantity, total_secondary_quantity, entry_count))
        '''
        total_quantity = func.sum(LedgerEntry.quantity).label("total_quantity")
        grouped = (
            select(
                LedgerEntry.bucket_key,
                total_quantity,
                func.sum(LedgerEntry.secondary_quantity).label("total_secondary_quantity"),
                func.count(LedgerEntry.entry_id).label("entry_count"),
            )
            .group_by(LedgerEntry.bucket_key)
        )
        if item_kind is not None:
            grouped = grouped.where(LedgerEntry.item_kind == item_kind)
        if order_id:
            grouped = grouped.where(LedgerEntry.order_id == order_id)
        if only_available:
            grouped = grouped.having(func.sum(LedgerEntry.quantity) > 0)

        total = self.db.execute(
            select(func.count()).select_from(grouped.subquery())
        ).scalar() or 0

        rows = self.db.execute(
            grouped.order_by(LedgerEntry.bucket_key.asc()).offset(offset).limit(limit)
        ).all()
        return total, [
            (
                row.bucket_key,
                float(row.total_quantity or 0),
                float(row.total_secondary_quantity) if row.total_secondary_quantity is not None else None,
                int(row.entry_count),
            )
            for row in rows
        ]

    # =========
    # Writes
    # =========
    def insert_ledger_entry(self, entry: LedgerEntry) -> LedgerEntry:
        '''
        Append one entry to the ledger inside the caller's transaction.
        The id is a UUID4 generated here, so no lookup query races the insert.
        '''
        if not entry.entry_id:
            entry.entry_id = str(uuid4())
        entry.bucket_key = normalize_bucket_key(entry.bucket_key)
        entry.product_code = normalize_product_code(entry.product_code)
        self.db.add(entry)
        self.db.flush()
        return entry
