"""Database connection and session management.

This module provides SQLModel engine setup, connection pooling, the
connection provider handed to the user store, and schema utilities.
"""

from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import QueuePool
from sqlmodel import SQLModel, Session, create_engine

from .config import Settings
from .logging_config import get_logger
# Import models to register them with SQLModel
from .models import Event, Report, User, UserHasEvent  # noqa: F401

logger = get_logger(__name__)


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """Turn on foreign key enforcement for every new SQLite connection.

    SQLite ignores ``ON DELETE CASCADE`` unless the pragma is set per
    connection.

    Args:
        engine: SQLite engine to configure
    """

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection: Any, connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_db_engine(settings: Settings) -> Engine:
    """Create the database engine described by the settings.

    Server databases get a QueuePool sized from the settings. SQLite keeps
    the dialect's default pool and gets foreign keys enabled.

    Args:
        settings: Application settings

    Returns:
        Engine: Configured SQLAlchemy engine
    """
    if settings.is_sqlite:
        engine = create_engine(
            settings.database_url,
            echo=settings.debug,  # Log SQL queries in debug mode
            connect_args={"check_same_thread": False},
        )
        enable_sqlite_foreign_keys(engine)
    else:
        engine = create_engine(
            settings.database_url,
            echo=settings.debug,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
            pool_recycle=settings.db_pool_recycle,
            pool_pre_ping=True,
            poolclass=QueuePool,
        )

    logger.debug(
        "Database engine created",
        extra={"url": engine.url.render_as_string(hide_password=True)},
    )
    return engine


class ConnectionProvider:
    """Hands out one database session per store call.

    The provider owns no state besides the engine; sessions are created on
    demand and closed when the ``with`` block exits.
    """

    def __init__(self, engine: Engine) -> None:
        """Initialize the provider with an engine.

        Args:
            engine: SQLAlchemy engine with its connection pool
        """
        self.engine = engine

    @classmethod
    def from_settings(cls, settings: Settings) -> "ConnectionProvider":
        """Build a provider around a new engine for the given settings."""
        return cls(create_db_engine(settings))

    @contextmanager
    def get_connection(self) -> Iterator[Session]:
        """Acquire a session for the duration of a ``with`` block.

        Objects loaded through the session stay readable after it closes.
        Uncommitted work is rolled back if the block raises.

        Yields:
            Session: SQLModel database session

        Example:
            with provider.get_connection() as session:
                session.exec(select(User)).all()
        """
        with Session(self.engine, expire_on_commit=False) as session:
            try:
                yield session
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()

    def dispose(self) -> None:
        """Close every pooled connection."""
        self.engine.dispose()


def create_db_and_tables(engine: Engine) -> None:
    """Create database tables based on SQLModel definitions.

    Note:
        This function is idempotent - it won't recreate existing tables.
    """
    SQLModel.metadata.create_all(engine)


def drop_db_and_tables(engine: Engine) -> None:
    """Drop all database tables.

    Warning:
        This function will permanently delete all data in the database.
        Only use for testing or development purposes.
    """
    SQLModel.metadata.drop_all(engine)


def get_database_info(engine: Engine) -> dict[str, Any]:
    """Get database connection information for health checks.

    Returns:
        dict: URL without credentials, dialect name and pool status
    """
    return {
        "url": engine.url.render_as_string(hide_password=True),
        "dialect": engine.dialect.name,
        "pool": engine.pool.status(),
    }


def check_database_connection(engine: Engine) -> bool:
    """Test database connection.

    Returns:
        bool: True if connection is successful, False otherwise
    """
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
            return True
    except SQLAlchemyError as e:
        logger.warning("Database connection check failed", extra={"error": str(e)})
        return False
