"""
Database session management.
"""
import logging
from contextlib import contextmanager
from typing import Iterator
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session
from tripsettle.core.config import settings
from tripsettle.core.exceptions import PersistenceError
from tripsettle.db.base import Base

logger = logging.getLogger(__name__)

engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DB_ECHO,
    pool_pre_ping=True,
    pool_recycle=3600
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Initialize database tables."""
    # Register every model on the metadata before creating tables
    import tripsettle.models  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Unit of work around a multi-row write.

    Commits when the block finishes, rolls back on any error. Storage errors
    are re-raised as PersistenceError with the original chained.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Transaction rolled back: {e}", exc_info=True)
        raise PersistenceError(f"Database write failed: {e.__class__.__name__}") from e
    except Exception:
        db.rollback()
        raise
