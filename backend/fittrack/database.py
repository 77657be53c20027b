"""
Database connection and session management.
Handles SQLAlchemy engine setup, the per-request session dependency and
the transaction scope used by every multi-row write.
"""
import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from .config import settings

logger = logging.getLogger(__name__)

DATABASE_URL = settings.database_url

# Render/Heroku hand out postgres:// URLs, SQLAlchemy requires postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

if DATABASE_URL.startswith("sqlite"):
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
        echo=settings.debug,
    )
else:
    engine = create_engine(
        DATABASE_URL,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,  # Verify connections before using
        echo=settings.debug,
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Iterator[Session]:
    """
    Dependency for FastAPI endpoints.

    One session per request; the session holds a single pooled connection
    for the lifetime of each transaction and returns it on close.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Commit everything issued inside the block, or roll all of it back.

    Usage:
        with transaction(db):
            db.add(row)
            db.flush()

    A failing rollback is logged and the original exception is re-raised.
    """
    try:
        yield db
        db.commit()
    except Exception:
        try:
            db.rollback()
        except Exception:
            logger.exception("Rollback failed")
        raise
