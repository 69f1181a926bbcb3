from split_ledger.db.session import get_engine
from split_ledger.db.base import Base
# tables register on Base.metadata when their models are imported
from split_ledger.models.ledger_entry import LedgerEntry  # noqa: F401
from split_ledger.models.product_attributes import ProductAttributes  # noqa: F401
from split_ledger.models.audit_log import AuditLog  # noqa: F401

def init_db():
    engine = get_engine()
    Base.metadata.create_all(bind=engine)
