"""Database session management with connection pooling"""

from typing import Any, Dict

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from fintrack.config import settings
from fintrack.infrastructure.database.models import Base


def engine_options(database_url: str) -> Dict[str, Any]:
    """Pool settings per backend; SQLite connections are shared across request threads"""
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    # Recycle after 1 hour to avoid stale connections
    return {
        "pool_pre_ping": True,
        "pool_size": 10,
        "max_overflow": 10,
        "pool_recycle": 3600,
    }


engine = create_engine(settings.database_url, **engine_options(settings.database_url))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """Create ledger tables if they do not exist"""
    Base.metadata.create_all(bind=engine)

