import time

import pytest
from sqlalchemy import select, func

from split_ledger.db.enums import AuditAction
from split_ledger.errors import (
    ValidationError,
    NotFoundError,
    DeadlineExceededError,
    ImmutableRecordError,
    InternalError,
)
from split_ledger.models.audit_log import AuditLog
from split_ledger.models.ledger_entry import LedgerEntry
from split_ledger.repositories.ledger_repository import LedgerRepository
from split_ledger.services.audit_log_service import AuditLogService
from split_ledger.services.split_execution_service import SplitExecutionService

MASTER_BUCKET = "P_1000 - 2.5"


@pytest.fixture
def service(db):
    return SplitExecutionService(db, AuditLogService(db))


def _entry_count(db):
    return db.execute(select(func.count()).select_from(LedgerEntry)).scalar()


def _aggregate(db, bucket_key):
    return LedgerRepository(db).get_bucket_aggregate(bucket_key)


# =========
# Worked example
# =========
def test_split_forty_over_six_hundred_and_four_hundred(db, receipt, service):
    result = service.execute_split(
        entry_id=receipt.entry_id,
        requested_area=40,
        splits=["P_600", "P_400"],
    )

    assert result.source_bucket_key == MASTER_BUCKET
    assert result.original_width == 1000
    assert [row.product_code for row in result.breakdown] == ["P_600", "P_400"]
    assert [row.width for row in result.breakdown] == [600, 400]
    assert [row.allocated_area for row in result.breakdown] == pytest.approx([24, 16])

    assert _aggregate(db, MASTER_BUCKET) == pytest.approx(60)
    assert _aggregate(db, "P_600 - 2.5") == pytest.approx(24)
    assert _aggregate(db, "P_400 - 2.5") == pytest.approx(16)

    consumed = db.get(LedgerEntry, result.consumed_entry_id)
    assert consumed.quantity == pytest.approx(-40)
    assert consumed.product_code == "P_1000"
    assert consumed.bucket_key == MASTER_BUCKET


def test_new_entries_carry_source_metadata(db, receipt, service):
    result = service.execute_split(bucket_key=MASTER_BUCKET, requested_area=40, splits=["P_600", "P_400"])

    for row in result.breakdown:
        produced = db.get(LedgerEntry, row.entry_id)
        assert produced.order_id == "ORDER-1"
        assert produced.item_kind == receipt.item_kind
        assert produced.order_transaction_type == receipt.order_transaction_type
        assert produced.actual_price_per_unit == receipt.actual_price_per_unit
        assert produced.declared_price_per_unit == receipt.declared_price_per_unit
        # mass is not carried by split rows
        assert produced.secondary_quantity is None


def test_source_entry_is_untouched(db, receipt, service):
    before = (receipt.quantity, receipt.secondary_quantity, receipt.updated_at)
    service.execute_split(entry_id=receipt.entry_id, requested_area=40, splits=["P_600", "P_400"])
    db.expire_all()
    entry = db.get(LedgerEntry, receipt.entry_id)
    assert (entry.quantity, entry.secondary_quantity, entry.updated_at) == before


def test_counter_example_writes_nothing(db, receipt, service):
    with pytest.raises(ValidationError, match="Remaining width cannot be matched"):
        service.execute_split(entry_id=receipt.entry_id, requested_area=40, splits=["P_600"])

    assert _entry_count(db) == 1
    assert _aggregate(db, MASTER_BUCKET) == pytest.approx(100)


def test_conservation_and_proportionality(db, receipt, service):
    result = service.execute_split(
        entry_id=receipt.entry_id,
        requested_area=33.3,
        splits=["P_300", "P_300", "P_200", "P_200"],
    )
    allocated = [row.allocated_area for row in result.breakdown]

    assert abs(sum(allocated) - 33.3) <= 1e-8
    for row in result.breakdown:
        assert row.allocated_area == pytest.approx(33.3 * row.width / 1000)
    assert all(a >= 0 for a in allocated)
    assert sum(row.width for row in result.breakdown) == 1000


def test_duplicate_codes_share_one_bucket(db, receipt, service):
    service.execute_split(entry_id=receipt.entry_id, requested_area=10, splits=["P_500", "P_500"])
    assert _aggregate(db, "P_500 - 2.5") == pytest.approx(10)


def test_requested_length_derives_area_from_master_width(db, receipt, service):
    result = service.execute_split(
        entry_id=receipt.entry_id,
        requested_length=25,
        splits=["P_600", "P_400"],
    )
    assert result.requested_area == pytest.approx(25)
    assert result.requested_length == 25
    assert [row.allocated_area for row in result.breakdown] == pytest.approx([15, 10])


def test_whole_bucket_can_be_drawn(db, receipt, service):
    service.execute_split(entry_id=receipt.entry_id, requested_length=100, splits=["P_500", "P_500"])
    assert _aggregate(db, MASTER_BUCKET) == pytest.approx(0)


# =========
# Rejections
# =========
def test_over_draw_is_rejected(db, receipt, service):
    with pytest.raises(ValidationError, match="exceeds available inventory") as exc:
        service.execute_split(entry_id=receipt.entry_id, requested_area=150, splits=["P_600", "P_400"])
    assert exc.value.details["available_area"] == pytest.approx(100)
    assert _entry_count(db) == 1


def test_over_draw_by_length_reports_max_length(db, receipt, service):
    with pytest.raises(ValidationError) as exc:
        service.execute_split(entry_id=receipt.entry_id, requested_length=120, splits=["P_600", "P_400"])
    assert exc.value.details["max_split_length"] == pytest.approx(100)


@pytest.mark.parametrize(
    "code, label",
    [("Q_400", "vendor"), ("R_400", "adhesive type"), ("S_400", "basis weight"), ("T_400", "material")],
)
def test_attribute_mismatch_writes_nothing(db, receipt, service, code, label):
    with pytest.raises(ValidationError, match=f"Product {code} has different {label}"):
        service.execute_split(entry_id=receipt.entry_id, requested_area=40, splits=["P_600", code])

    assert _entry_count(db) == 1
    assert db.execute(select(func.count()).select_from(AuditLog)).scalar() == 1


def test_first_row_may_not_use_master_width(db, receipt, service):
    with pytest.raises(ValidationError, match="First split width must be less than master width"):
        service.execute_split(entry_id=receipt.entry_id, requested_area=40, splits=["P_1000"])
    assert _entry_count(db) == 1


def test_unknown_split_code_is_not_found(db, receipt, service):
    with pytest.raises(NotFoundError) as exc:
        service.execute_split(entry_id=receipt.entry_id, requested_area=40, splits=["P_600", "NOPE"])
    assert exc.value.details["product_codes"] == ["NOPE"]
    assert _entry_count(db) == 1


def test_unknown_source_is_not_found(db, receipt, service):
    with pytest.raises(NotFoundError):
        service.execute_split(bucket_key="P_1000 - 7", requested_area=40, splits=["P_600", "P_400"])


@pytest.mark.parametrize(
    "kwargs",
    [
        {"requested_area": 40, "splits": []},
        {"requested_area": 40, "splits": ["P_600", " "]},
        {"requested_area": 0, "splits": ["P_600", "P_400"]},
        {"requested_area": -3, "splits": ["P_600", "P_400"]},
        {"requested_area": float("nan"), "splits": ["P_600", "P_400"]},
        {"splits": ["P_600", "P_400"]},
        {"requested_area": 40, "requested_length": 40, "splits": ["P_600", "P_400"]},
    ],
)
def test_malformed_requests(db, receipt, service, kwargs):
    with pytest.raises(ValidationError):
        service.execute_split(entry_id=receipt.entry_id, **kwargs)
    assert _entry_count(db) == 1


def test_expired_deadline_writes_nothing(db, receipt, service):
    with pytest.raises(DeadlineExceededError) as exc:
        service.execute_split(
            entry_id=receipt.entry_id,
            requested_area=40,
            splits=["P_600", "P_400"],
            deadline=time.monotonic() - 1,
        )
    assert exc.value.retryable is True
    assert _entry_count(db) == 1


# =========
# Audit and immutability
# =========
def test_split_is_audited(db, receipt, service):
    result = service.execute_split(
        entry_id=receipt.entry_id,
        requested_area=40,
        splits=["P_600", "P_400"],
        operator_id="clerk-7",
    )
    split_log = db.get(AuditLog, result.audit_ref_id)
    assert split_log.action == AuditAction.split
    assert split_log.entity_id == receipt.entry_id
    assert split_log.operator_id == "clerk-7"
    assert split_log.before_value["available_area"] == pytest.approx(100)
    assert [r["product_code"] for r in split_log.after_value["rows"]] == ["P_600", "P_400"]

    creates = db.execute(
        select(func.count()).select_from(AuditLog).where(AuditLog.action == AuditAction.create)
    ).scalar()
    # receipt + consuming entry + two produced entries
    assert creates == 4


def test_ledger_entries_cannot_be_updated(db, receipt):
    receipt.quantity = 1
    with pytest.raises(ImmutableRecordError):
        db.flush()
    db.rollback()


def test_ledger_entries_cannot_be_deleted(db, receipt):
    db.delete(receipt)
    with pytest.raises(ImmutableRecordError):
        db.flush()
    db.rollback()


# =========
# Width and internal failures
# =========
def test_widths_above_master_width_are_rejected(db, receipt, service):
    with pytest.raises(ValidationError, match="Remaining width cannot be matched") as exc:
        service.execute_split(entry_id=receipt.entry_id, requested_area=40, splits=["P_600", "P_600"])
    assert exc.value.details["remaining_width"] == -200
    assert _entry_count(db) == 1


def test_zero_width_row_is_rejected(db, receipt, zero_width_product, service):
    with pytest.raises(ValidationError, match="Product Z_0 has a non-positive width"):
        service.execute_split(entry_id=receipt.entry_id, requested_area=40, splits=["P_600", "P_400", "Z_0"])
    assert _entry_count(db) == 1


def test_zero_width_source_is_internal_error_and_writes_nothing(db, zero_width_receipt, service):
    before = db.execute(select(func.count()).select_from(AuditLog)).scalar()

    with pytest.raises(InternalError):
        service.execute_split(entry_id=zero_width_receipt.entry_id, requested_area=5, splits=["P_600", "P_400"])

    assert _entry_count(db) == 1
    assert db.execute(select(func.count()).select_from(AuditLog)).scalar() == before
