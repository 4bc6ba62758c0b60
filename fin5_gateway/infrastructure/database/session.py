"""Database engine and per-request sessions"""

from typing import Any, Dict, Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from fin5_gateway.config import settings


def engine_options(database_url: str) -> Dict[str, Any]:
    """SQLite (local runs, tests) gets a single-thread-safe connection; servers get a pool"""
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    # Pool of 10 (+10 overflow), recycled hourly
    return {"pool_pre_ping": True, "pool_size": 10, "max_overflow": 10, "pool_recycle": 3600}


engine = create_engine(settings.database_url, **engine_options(settings.database_url))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Iterator[Session]:
    """FastAPI dependency yielding a session closed after the request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
