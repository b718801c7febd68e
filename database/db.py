"""
Database connection utilities.

Provides:
- Database engine creation
- Session management for FastAPI requests and scripts
- Scoped transactions that commit or roll back as a unit
"""

from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from typing import Generator, Iterator
import logging

import config
from database.models import Base

logger = logging.getLogger(__name__)

DATABASE_URL = config.DATABASE_URL

if not DATABASE_URL:
    raise ValueError("DATABASE_URL environment variable not set!")

connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    # Sessions are used from FastAPI's threadpool; wait on locks instead of failing fast
    connect_args = {"check_same_thread": False, "timeout": 30}

# pool_pre_ping=True: Check connection health before using
engine = create_engine(
    DATABASE_URL,
    pool_pre_ping=True,
    connect_args=connect_args,
    echo=False  # Set to True to see SQL queries (debugging)
)

# Session factory
SessionLocal = sessionmaker(
    bind=engine,
    expire_on_commit=False,
    autoflush=False
)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for FastAPI routes to get database session.

    Usage in FastAPI:
        @router.get("/items")
        def get_items(db: Session = Depends(get_db)):
            return db.query(Item).all()

    Commits on success, rolls back on exception, always closes.
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Database error: {e}")
        raise
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Run a multi-step write as one unit on an existing session.

    Usage:
        with transaction(db):
            db.add(donation)
            db.execute(update(...))

    Commits when the block exits normally. On any exception the session is
    rolled back and the exception re-raised, so no partial write survives.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


@contextmanager
def session_scope() -> Iterator[Session]:
    """Standalone session for scripts and background use."""
    db = SessionLocal()
    try:
        with transaction(db):
            yield db
    finally:
        db.close()


def create_tables():
    """
    Create all tables in database.

    WARNING: Only use in development!
    """
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")


def drop_tables():
    """
    Drop all tables in database.

    WARNING: DESTRUCTIVE! Only use in testing.
    """
    Base.metadata.drop_all(bind=engine)
    logger.warning("All database tables dropped")
