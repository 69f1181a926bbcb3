# split_ledger/db/locks.py
"""
Per-bucket serialization for read-aggregate-then-insert sequences.

Two splits against the same bucket must not both observe the pre-split aggregate.
bucket_lock() holds an in-process lock keyed by the normalized bucket key and, on
PostgreSQL, a transaction-scoped advisory lock, so the holder's commit is visible
to the next holder's aggregate read.
"""
import threading
from contextlib import contextmanager
from typing import Dict, Iterator

from sqlalchemy import text
from sqlalchemy.orm import Session

from split_ledger.models.ledger_entry import normalize_bucket_key

_registry_guard = threading.Lock()
_bucket_locks: Dict[str, threading.Lock] = {}


def _lock_for(bucket_key: str) -> threading.Lock:
    with _registry_guard:
        lock = _bucket_locks.get(bucket_key)
        if lock is None:
            lock = threading.Lock()
            _bucket_locks[bucket_key] = lock
        return lock


@contextmanager
def bucket_lock(db: Session, bucket_key: str) -> Iterator[None]:
    '''
    Serialize work on one bucket. The caller must commit or roll back
    before leaving the block; the advisory lock is released with the transaction.
    '''
    key = normalize_bucket_key(bucket_key)
    lock = _lock_for(key)
    with lock:
        if db.get_bind().dialect.name == "postgresql":
            db.execute(
                text("SELECT pg_advisory_xact_lock(hashtext(:bucket_key))"),
                {"bucket_key": key},
            )
        yield
