"""
Database configuration and session management for StreamQueue.
"""

import logging
import os
from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool


logger = logging.getLogger(__name__)


def get_database_url():
    """Read DATABASE_URL, fixing Heroku-style postgres:// URLs for SQLAlchemy"""
    database_url = os.getenv("DATABASE_URL")
    if database_url and database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://", 1)
    return database_url or "sqlite:///database/streamqueue.db"


def build_engine(database_url):
    """Create an engine; in-memory SQLite shares one connection across threads"""
    if database_url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url == "sqlite://":
            options["poolclass"] = StaticPool
        elif database_url.startswith("sqlite:///") and not database_url.startswith("sqlite:////"):
            directory = os.path.dirname(database_url[len("sqlite:///"):])
            if directory:
                os.makedirs(directory, exist_ok=True)
        return create_engine(database_url, echo=False, **options)

    return create_engine(
        database_url,
        echo=False,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,
        pool_recycle=300
    )


engine = build_engine(get_database_url())

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)
Base = declarative_base()


def init_db():
    """Initialize database tables"""
    # Models must be imported so they register on Base.metadata
    from . import queue_models  # noqa: F401
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready")


@contextmanager
def get_db():
    """Context manager for database sessions with automatic commit/rollback"""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
