"""
Database check run at startup: creates the tables when they are missing.
"""
from sqlalchemy import inspect
from split_ledger.db.session import get_engine
from split_ledger.db.init_db import init_db
from split_ledger.logger import get_logger

logger = get_logger(__name__)

REQUIRED_TABLES = {"ledger_entries", "product_attributes", "audit_logs"}


def check_tables_exist() -> bool:
    inspector = inspect(get_engine())
    return REQUIRED_TABLES.issubset(set(inspector.get_table_names()))


def auto_init():
    logger.info("Checking database initialization state...")
    if check_tables_exist():
        logger.info("Database tables already exist")
        return
    logger.info("Database tables missing, creating...")
    try:
        init_db()
    except Exception:
        logger.exception("Creating database tables failed")
        raise
    logger.info("Database tables created")


if __name__ == "__main__":
    auto_init()
