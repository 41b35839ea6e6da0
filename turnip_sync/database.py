"""
Database engine and session factory for the local store.

The cache and the settings table share one SQLite file by default. The
engine is built from configuration by the context factory rather than at
import time, so tests can point it at an in-memory database.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from .logging_config import get_logger
from .models import Base

logger = get_logger(__name__)


def get_connect_args(db_url: str) -> dict:
    """
    Get database-specific connection arguments.

    Args:
        db_url: Database connection URL

    Returns:
        Connection arguments dict
    """
    if "sqlite" in db_url:
        return {"check_same_thread": False}
    return {}


def create_db_engine(db_url: str) -> Engine:
    """
    Create an engine for ``db_url`` and make sure the tables exist.

    In-memory SQLite URLs use a single shared connection so every session
    sees the same data.

    Args:
        db_url: SQLAlchemy database URL

    Returns:
        Configured engine
    """
    kwargs = {"connect_args": get_connect_args(db_url), "echo": False}
    if db_url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool

    engine = create_engine(db_url, **kwargs)
    Base.metadata.create_all(bind=engine, checkfirst=True)

    safe_url = db_url.split("@")[0] + "@..." if "@" in db_url else db_url
    logger.info("Local store ready", database=safe_url)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
