import math
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from split_ledger.constants import EPSILON, SYSTEM_OPERATOR, WIDTH_UNITS_PER_LENGTH_UNIT
from split_ledger.db.enums import AuditEntityType
from split_ledger.db.locks import bucket_lock
from split_ledger.errors import (
    SplitLedgerError,
    ValidationError,
    NotFoundError,
    InternalError,
    ConflictError,
    DeadlineExceededError,
)
from split_ledger.logger import get_logger
from split_ledger.models.ledger_entry import LedgerEntry, make_bucket_key, normalize_product_code
from split_ledger.models.product_attributes import ProductAttributes
from split_ledger.repositories.ledger_repository import ILedgerRepository, LedgerRepository
from split_ledger.repositories.catalog_repository import ICatalogRepository, CatalogRepository
from split_ledger.services.allocation import allocate_area, area_from_length
from split_ledger.services.audit_log_service import AuditLogService
from split_ledger.services.eligibility_service import EligibilityService, SplitSource

logger = get_logger(__name__)

# (attribute, label used in error messages)
_MATCHING_ATTRIBUTES = (
    ("vendor_id", "vendor"),
    ("adhesive_type", "adhesive type"),
    ("basis_weight", "basis weight"),
    ("material", "material"),
)


@dataclass
class SplitRowResult:
    entry_id: str
    product_code: str
    width: int
    allocated_area: float


@dataclass
class SplitResult:
    consumed_entry_id: str
    source_bucket_key: str
    requested_area: float
    requested_length: Optional[float]
    original_width: int
    breakdown: List[SplitRowResult] = field(default_factory=list)
    audit_ref_id: Optional[str] = None


class SplitExecutionService:
    """
    Validates a split plan against the ledger and catalog, then commits it.

    One call is one all-or-nothing transaction:
    - the aggregate read and every insert happen under the source bucket's lock
    - any validation failure rolls back with nothing written
    - the service owns commit/rollback, because the lock must be held until commit
    """

    def __init__(
        self,
        db: Session,
        audit_log_service: AuditLogService,
        eligibility_service: Optional[EligibilityService] = None,
        ledger_repository: Optional[ILedgerRepository] = None,
        catalog_repository: Optional[ICatalogRepository] = None,
    ):
        self.db = db
        self.audit_log_service = audit_log_service
        self.ledger = ledger_repository or LedgerRepository(db)
        self.catalog = catalog_repository or CatalogRepository(db)
        self.eligibility_service = eligibility_service or EligibilityService(
            db, ledger_repository=self.ledger, catalog_repository=self.catalog
        )

    def execute_split(
        self,
        *,
        splits: Sequence[str],
        entry_id: Optional[str] = None,
        bucket_key: Optional[str] = None,
        requested_area: Optional[float] = None,
        requested_length: Optional[float] = None,
        operator_id: str = SYSTEM_OPERATOR,
        deadline: Optional[float] = None,
    ) -> SplitResult:
        """
        Execute a split plan.

        :param splits: product codes in plan order, duplicates allowed, at least one
        :param entry_id: source entry (takes precedence over bucket_key)
        :param bucket_key: source bucket key
        :param requested_area: area to consume from the source bucket
        :param requested_length: alternatively, the length to cut; area = master width * length
        :param operator_id: recorded on the audit log
        :param deadline: time.monotonic() value after which the transaction is abandoned
        :raises ValidationError, NotFoundError, NotEligibleError, InternalError,
                ConflictError, DeadlineExceededError
        """
        self._validate_shape(splits, requested_area, requested_length)
        codes = [normalize_product_code(c) for c in splits]

        try:
            # 1. resolve the source bucket (ledger rows are immutable, safe before locking)
            source = self.eligibility_service.resolve_source(entry_id=entry_id, bucket_key=bucket_key)
            original_width = source.attributes.width
            if original_width <= 0:
                raise InternalError(
                    "Catalog width of the source product is not positive",
                    details={"product_code": source.attributes.product_code, "width": original_width},
                )

            with bucket_lock(self.db, source.bucket_key):
                self._check_deadline(deadline)
                result = self._validate_and_write(
                    source=source,
                    codes=codes,
                    requested_area=requested_area,
                    requested_length=requested_length,
                    operator_id=operator_id,
                )
                self._check_deadline(deadline)
                self.db.commit()

        except InternalError as e:
            self.db.rollback()
            logger.exception(f"[split] internal invariant violated; nothing written: {e.message} details={e.details}")
            raise
        except SplitLedgerError:
            self.db.rollback()
            raise
        except (OperationalError, IntegrityError) as e:
            self.db.rollback()
            logger.warning(f"[split] transaction conflict, rolled back: {e}")
            raise ConflictError(
                "The split conflicted with a concurrent change; retry the request",
                details={"reason": str(e.orig) if getattr(e, "orig", None) else str(e)},
            ) from e
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"[split] committed source={result.source_bucket_key} "
            f"area={result.requested_area} rows={len(result.breakdown)} "
            f"consumed_entry={result.consumed_entry_id}"
        )
        return result

    # =========
    # Pipeline
    # =========
    def _validate_and_write(
        self,
        *,
        source: SplitSource,
        codes: List[str],
        requested_area: Optional[float],
        requested_length: Optional[float],
        operator_id: str,
    ) -> SplitResult:
        original = source.attributes
        original_width = original.width

        # 2. available area, read under the bucket lock
        available_area = self.ledger.get_bucket_aggregate(source.bucket_key)
        area = self._resolve_requested_area(
            source=source,
            available_area=available_area,
            requested_area=requested_area,
            requested_length=requested_length,
        )

        # 3. every distinct code must exist
        products = self.catalog.get_many(codes)
        missing = [c for c in dict.fromkeys(codes) if c not in products]
        if missing:
            raise NotFoundError(
                f"Product code(s) not found: {', '.join(missing)}",
                details={"product_codes": missing},
            )

        # 4. attribute homogeneity, in plan order
        for code in codes:
            self._assert_compatible(original, products[code])

        widths = [products[c].width for c in codes]

        # 5. the first row may not reuse the full master width
        if widths[0] >= original_width:
            raise ValidationError(
                "First split width must be less than master width to perform a split",
                details={"product_code": codes[0], "width": widths[0], "master_width": original_width},
            )

        # 6. every row has a real width
        for code, width in zip(codes, widths):
            if width <= 0:
                raise ValidationError(
                    f"Product {code} has a non-positive width",
                    details={"product_code": code, "width": width},
                )

        # 7. width conservation, exact integer equality
        selected_width = sum(widths)
        if selected_width != original_width:
            raise ValidationError(
                "Remaining width cannot be matched",
                details={
                    "master_width": original_width,
                    "selected_width": selected_width,
                    "remaining_width": original_width - selected_width,
                },
            )

        # 8. proportional allocation, last row takes the remainder
        allocations = allocate_area(area, widths, original_width)

        # 9. commit: one consuming entry, then one producing entry per row
        consumed = self.ledger.insert_ledger_entry(
            self._derive_entry(
                source.entry,
                product_code=source.entry.product_code,
                quantity=-area,
                bucket_key=source.bucket_key,
            )
        )
        self._audit_created(consumed, operator_id)

        breakdown: List[SplitRowResult] = []
        for code, width, allocated in zip(codes, widths, allocations):
            produced = self.ledger.insert_ledger_entry(
                self._derive_entry(
                    source.entry,
                    product_code=code,
                    quantity=allocated,
                    bucket_key=make_bucket_key(code, source.entry.actual_price_per_unit),
                )
            )
            self._audit_created(produced, operator_id)
            breakdown.append(
                SplitRowResult(
                    entry_id=produced.entry_id,
                    product_code=code,
                    width=width,
                    allocated_area=allocated,
                )
            )

        audit_ref_id = self.audit_log_service.record_split(
            order_id=source.entry.order_id,
            source_entry_id=source.entry.entry_id,
            before_value={"bucket_key": source.bucket_key, "available_area": available_area},
            after_value={
                "requested_area": area,
                "requested_length": requested_length,
                "master_width": original_width,
                "consumed_entry_id": consumed.entry_id,
                "rows": [
                    {"entry_id": r.entry_id, "product_code": r.product_code, "width": r.width, "allocated_area": r.allocated_area}
                    for r in breakdown
                ],
            },
            operator_id=operator_id,
        )

        logger.info(
            f"[split] source={source.entry.product_code} master_width={original_width} "
            f"widths={widths} requested_area={area} available_area={available_area} "
            f"allocations={allocations}"
        )

        return SplitResult(
            consumed_entry_id=consumed.entry_id,
            source_bucket_key=source.bucket_key,
            requested_area=area,
            requested_length=requested_length,
            original_width=original_width,
            breakdown=breakdown,
            audit_ref_id=audit_ref_id,
        )

    def _resolve_requested_area(
        self,
        *,
        source: SplitSource,
        available_area: float,
        requested_area: Optional[float],
        requested_length: Optional[float],
    ) -> float:
        '''
        Turn the request into the area drawn from the bucket and check it is available.
        A length-derived area that overshoots the available area by no more than EPSILON
        is floating-point noise and is clamped to the available area.
        '''
        width = source.attributes.width
        if requested_length is not None:
            area = area_from_length(width, requested_length)
        else:
            area = float(requested_area)

        if area > available_area:
            if requested_length is not None and area - available_area <= EPSILON:
                return available_area
            details: Dict[str, object] = {
                "requested_area": area,
                "available_area": available_area,
                "product_code": source.entry.product_code,
                "bucket_key": source.bucket_key,
            }
            if requested_length is not None:
                details["requested_length"] = requested_length
                details["max_split_length"] = max(available_area, 0.0) / (width / WIDTH_UNITS_PER_LENGTH_UNIT)
            raise ValidationError(
                "Requested split exceeds available inventory for this roll",
                details=details,
            )
        return area

    # =========
    # Helpers
    # =========
    def _validate_shape(
        self,
        splits: Sequence[str],
        requested_area: Optional[float],
        requested_length: Optional[float],
    ) -> None:
        if isinstance(splits, str) or not splits:
            raise ValidationError("At least one split product code is required")
        for code in splits:
            if not isinstance(code, str) or not code.strip():
                raise ValidationError("product_code is required and cannot be blank")

        if (requested_area is None) == (requested_length is None):
            raise ValidationError("Exactly one of requested_area or requested_length must be provided")

        name, value = (
            ("requested_area", requested_area)
            if requested_area is not None
            else ("requested_length", requested_length)
        )
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
            raise ValidationError(
                f"{name} must be a positive number",
                details={name: value},
            )

    def _assert_compatible(self, original: ProductAttributes, candidate: ProductAttributes) -> None:
        for attribute, label in _MATCHING_ATTRIBUTES:
            expected = getattr(original, attribute)
            actual = getattr(candidate, attribute)
            if actual != expected:
                raise ValidationError(
                    f"Product {candidate.product_code} has different {label}",
                    details={
                        "product_code": candidate.product_code,
                        "attribute": attribute,
                        "expected": str(expected),
                        "actual": str(actual),
                    },
                )

    def _derive_entry(
        self,
        source: LedgerEntry,
        *,
        product_code: str,
        quantity: float,
        bucket_key: str,
    ) -> LedgerEntry:
        '''
        New entry carrying over the source's order, kind and price fields.
        secondary_quantity is never written by a split.
        '''
        return LedgerEntry(
            order_id=source.order_id,
            bucket_key=bucket_key,
            item_kind=source.item_kind,
            product_code=product_code,
            quantity=quantity,
            secondary_quantity=None,
            order_transaction_type=source.order_transaction_type,
            order_payment_type=source.order_payment_type,
            declared_price_per_unit=source.declared_price_per_unit,
            declared_price_per_kg=source.declared_price_per_kg,
            actual_price_per_unit=source.actual_price_per_unit,
            actual_price_per_kg=source.actual_price_per_kg,
        )

    def _audit_created(self, entry: LedgerEntry, operator_id: str) -> None:
        self.audit_log_service.record_create(
            order_id=entry.order_id,
            entity_type=AuditEntityType.LedgerEntry,
            entity_id=entry.entry_id,
            operator_id=operator_id,
            after_value={
                "bucket_key": entry.bucket_key,
                "product_code": entry.product_code,
                "quantity": entry.quantity,
            },
        )

    def _check_deadline(self, deadline: Optional[float]) -> None:
        if deadline is not None and time.monotonic() > deadline:
            raise DeadlineExceededError("Split deadline exceeded before commit; nothing was written")
