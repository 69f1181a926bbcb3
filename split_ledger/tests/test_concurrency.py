import threading

import pytest

from split_ledger.db.session import get_session
from split_ledger.errors import ValidationError
from split_ledger.repositories.ledger_repository import LedgerRepository
from split_ledger.services.audit_log_service import AuditLogService
from split_ledger.services.split_execution_service import SplitExecutionService

MASTER_BUCKET = "P_1000 - 2.5"


def test_concurrent_splits_never_overdraw(db, receipt):
    workers = 4
    barrier = threading.Barrier(workers)
    outcomes = []
    guard = threading.Lock()

    def run_split():
        session = get_session()
        try:
            barrier.wait()
            service = SplitExecutionService(session, AuditLogService(session))
            service.execute_split(bucket_key=MASTER_BUCKET, requested_area=60, splits=["P_600", "P_400"])
            outcome = "ok"
        except ValidationError:
            outcome = "rejected"
        except Exception as e:  # surfaced through the assertion below
            outcome = repr(e)
        finally:
            session.close()
        with guard:
            outcomes.append(outcome)

    threads = [threading.Thread(target=run_split) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert sorted(outcomes) == ["ok"] + ["rejected"] * (workers - 1)

    db.expire_all()
    ledger = LedgerRepository(db)
    assert ledger.get_bucket_aggregate(MASTER_BUCKET) == pytest.approx(40)
    assert ledger.get_bucket_aggregate("P_600 - 2.5") == pytest.approx(36)


def test_concurrent_small_splits_all_commit(db, receipt):
    workers = 5
    barrier = threading.Barrier(workers)
    errors = []

    def run_split():
        session = get_session()
        try:
            barrier.wait()
            SplitExecutionService(session, AuditLogService(session)).execute_split(
                bucket_key=MASTER_BUCKET, requested_area=20, splits=["P_500", "P_500"]
            )
        except Exception as e:
            errors.append(e)
        finally:
            session.close()

    threads = [threading.Thread(target=run_split) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert errors == []
    db.expire_all()
    assert LedgerRepository(db).get_bucket_aggregate(MASTER_BUCKET) == pytest.approx(0)
    assert LedgerRepository(db).get_bucket_aggregate("P_500 - 2.5") == pytest.approx(100)
