"""Database session management"""
import logging

from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker

from webhook_ledger.models import Base
from webhook_ledger.core.config import settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str):
    """Create the process-wide engine (connection pool) for ``database_url``"""
    url = make_url(database_url)
    engine_kwargs = {"pool_pre_ping": True}

    if url.get_backend_name() == "sqlite":
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    else:
        engine_kwargs.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=3600,
        )
        if settings.DATABASE_SSL_REQUIRE:
            engine_kwargs["connect_args"] = {"sslmode": "require"}

    return create_engine(url, **engine_kwargs)


# Create engine
engine = build_engine(settings.DATABASE_URL)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Dependency for FastAPI endpoints"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory():
    """Dependency handing out the session factory itself

    Used where a session has to be opened inside a worker thread rather
    than for the lifetime of the request.
    """
    return SessionLocal


def init_db():
    """Initialize database (create tables and indexes if absent)"""
    Base.metadata.create_all(bind=engine)


def check_db_connection(db) -> None:
    """Run a trivial liveness query; raises if the store is unreachable"""
    db.execute(text("SELECT 1"))


def dispose_engine():
    """Close every pooled connection (process shutdown)"""
    engine.dispose()
    logger.info("Database connection pool closed")
