"""
Database session management.
"""
import logging
from contextlib import contextmanager
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session
from giftbuddy.core.config import settings
from giftbuddy.core.exceptions import StorageError
from giftbuddy.db.base import Base

logger = logging.getLogger(__name__)


def build_engine(url: str, **kwargs) -> Engine:
    """Create an engine; SQLite connections get foreign-key enforcement."""
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        new_engine = create_engine(url, echo=settings.DB_ECHO, **kwargs)

        @event.listens_for(new_engine, "connect")
        def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return new_engine

    return create_engine(
        url,
        echo=settings.DB_ECHO,
        pool_pre_ping=True,
        pool_recycle=3600,
        **kwargs
    )


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session, table: str, operation: str):
    """
    All-or-nothing write scope.

    Commits when the block finishes; any failure rolls back every row written
    inside it. Database errors surface as StorageError tagged with the table
    and operation, never with connection details.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Storage failure during {operation} on {table}", exc_info=True)
        raise StorageError(table, operation, type(e).__name__) from e
    except Exception:
        db.rollback()
        raise


def init_db(bind: Engine = None):
    """Initialize database tables."""
    # Register every model on Base.metadata before create_all
    import giftbuddy.models  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)
