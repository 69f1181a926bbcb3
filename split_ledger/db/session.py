# split_ledger/db/session.py
from typing import Optional
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
import os

from split_ledger.logger import get_logger

logger = get_logger(__name__)

_engine: Optional[Engine] = None
_SessionLocal = None


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        db_url = os.environ.get("DATABASE_URL")
        if not db_url:
            raise RuntimeError("DATABASE_URL not set")
        logger.info(f"Using database URL: {db_url}")
        connect_args = {}
        if db_url.startswith("sqlite"):
            # sessions are handed across Flask worker threads
            connect_args = {"check_same_thread": False}
        _engine = create_engine(db_url, connect_args=connect_args)
    return _engine


def get_session() -> Session:
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=get_engine()
        )
    return _SessionLocal()


def reset_engine(db_url: Optional[str] = None) -> None:
    '''
    Dispose the cached engine and session factory.
    If db_url is given, DATABASE_URL is replaced so the next get_engine() binds to it.
    '''
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None
    if db_url:
        os.environ["DATABASE_URL"] = db_url
