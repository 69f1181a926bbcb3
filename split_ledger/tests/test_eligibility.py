import pytest

from split_ledger.errors import ValidationError, NotFoundError, NotEligibleError
from split_ledger.services.eligibility_service import EligibilityService

MASTER_BUCKET = "P_1000 - 2.5"


def test_eligible_by_entry_id(db, receipt):
    result = EligibilityService(db).check_eligibility(entry_id=receipt.entry_id)

    assert result.eligible is True
    assert result.available_quantity == pytest.approx(100)
    assert result.product_code == "P_1000"
    assert result.width == 1000
    assert result.vendor_id == "V1"
    assert result.adhesive_type == "A1"
    assert float(result.basis_weight) == pytest.approx(120)
    assert result.material == "M1"
    assert result.bucket_key == MASTER_BUCKET
    assert result.representative_entry_id == receipt.entry_id


def test_bucket_key_is_case_and_whitespace_insensitive(db, receipt):
    by_key = EligibilityService(db).check_eligibility(bucket_key="  p_1000 -   2.5 ")
    by_entry = EligibilityService(db).check_eligibility(entry_id=receipt.entry_id)
    assert by_key == by_entry


def test_bucket_key_narrowed_by_product_code(db, receipt):
    result = EligibilityService(db).check_eligibility(bucket_key=MASTER_BUCKET, product_code="p_1000")
    assert result.eligible is True

    with pytest.raises(NotFoundError):
        EligibilityService(db).check_eligibility(bucket_key=MASTER_BUCKET, product_code="P_600")


def test_representative_entry_is_the_earliest(db, receipt, inventory):
    inventory.record_receipt(product_code="P_1000", quantity=20, actual_price_per_unit="2.50")
    db.commit()

    result = EligibilityService(db).check_eligibility(bucket_key=MASTER_BUCKET)
    assert result.representative_entry_id == receipt.entry_id
    assert result.available_quantity == pytest.approx(120)


def test_empty_bucket_is_not_eligible(db, receipt, inventory):
    # offsetting entry drains the bucket
    from split_ledger.services.split_execution_service import SplitExecutionService
    from split_ledger.services.audit_log_service import AuditLogService

    SplitExecutionService(db, AuditLogService(db)).execute_split(
        bucket_key=MASTER_BUCKET,
        requested_area=100,
        splits=["P_600", "P_400"],
    )
    result = EligibilityService(db).check_eligibility(bucket_key=MASTER_BUCKET)
    assert result.eligible is False
    assert result.available_quantity == pytest.approx(0)


def test_unknown_entry_is_not_found(db, receipt):
    with pytest.raises(NotFoundError) as exc:
        EligibilityService(db).check_eligibility(entry_id="00000000-0000-0000-0000-000000000000")
    assert type(exc.value) is NotFoundError


def test_unknown_bucket_is_not_found(db, receipt):
    with pytest.raises(NotFoundError) as exc:
        EligibilityService(db).check_eligibility(bucket_key="P_1000 - 9.99")
    assert type(exc.value) is NotFoundError


def test_hardware_bucket_is_not_eligible(db, hardware_receipt):
    with pytest.raises(NotEligibleError):
        EligibilityService(db).check_eligibility(bucket_key="CORE_76 - 0.3")

    with pytest.raises(NotEligibleError):
        EligibilityService(db).check_eligibility(entry_id=hardware_receipt.entry_id)


def test_identifier_is_required(db):
    with pytest.raises(ValidationError):
        EligibilityService(db).check_eligibility()
    with pytest.raises(ValidationError):
        EligibilityService(db).check_eligibility(entry_id="   ", bucket_key="")


def test_check_is_read_only(db, receipt):
    from sqlalchemy import select, func
    from split_ledger.models.ledger_entry import LedgerEntry

    service = EligibilityService(db)
    first = service.check_eligibility(entry_id=receipt.entry_id)
    second = service.check_eligibility(entry_id=receipt.entry_id)

    assert first == second
    assert db.execute(select(func.count()).select_from(LedgerEntry)).scalar() == 1


def test_entry_id_and_bucket_key_agree_on_representative(db, receipt, inventory):
    later = inventory.record_receipt(product_code="P_1000", quantity=20, actual_price_per_unit="2.5")
    db.commit()

    service = EligibilityService(db)
    by_later_entry = service.check_eligibility(entry_id=later.entry_id)
    by_key = service.check_eligibility(bucket_key=MASTER_BUCKET)

    assert by_later_entry == by_key
    assert by_later_entry.representative_entry_id == receipt.entry_id
