"""
Database session management.
"""
import logging
from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.orm.exc import StaleDataError
from fleetledger.core.config import settings
from fleetledger.core.exceptions import ConcurrencyConflict, PersistenceUnavailable
from fleetledger.db.base import Base

logger = logging.getLogger(__name__)

connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    connect_args["check_same_thread"] = False

engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DB_ECHO,
    pool_pre_ping=True,
    pool_recycle=3600,
    connect_args=connect_args
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def write_transaction(db: Session, action: str):
    """
    Commit the work done inside the block.
    Database failures are rolled back and surfaced as PersistenceUnavailable;
    nothing is retried.
    """
    try:
        yield db
        db.commit()
    except StaleDataError as e:
        db.rollback()
        logger.info(f"Concurrent update detected while trying to {action}")
        raise ConcurrencyConflict("Record was modified by another session. Reload and try again.") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error while trying to {action}: {e}", exc_info=True)
        raise PersistenceUnavailable(f"Could not {action}. Please try again later.") from e


def init_db():
    """Initialize database tables."""
    # Models must be imported so their tables are registered on Base.metadata
    import fleetledger.models  # noqa: F401
    Base.metadata.create_all(bind=engine)
