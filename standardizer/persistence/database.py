"""Database connection and session management.

This module owns the process-wide engine and session factory. Stores and
repositories only ever see sessions handed out by get_session().
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import ArgumentError, IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from standardizer.logging import get_logger

from .exceptions import DatabaseConnectionError, DataIntegrityError, PersistenceError

# Seconds SQLite waits on a locked database before raising
SQLITE_BUSY_TIMEOUT = 30

_engine: Engine | None = None
_session_factory: sessionmaker | None = None

logger = get_logger(__name__, component="database")


def init_database(database_url: str) -> None:
    """Initialize the engine and create the schema if tables don't exist.

    Call once at startup. Calling again replaces the previous engine.

    SQLite specifics:
    - the parent directory of a file database is created
    - ``:memory:`` databases share one connection so every session sees
      the same data
    - foreign keys and WAL journaling are enabled per connection

    Args:
        database_url: SQLAlchemy URL (e.g. "sqlite:///./data/standardizer.db")

    Raises:
        DatabaseConnectionError: If initialization fails

    Example:
        >>> init_database("sqlite:///:memory:")
    """
    global _engine, _session_factory

    if not database_url or not isinstance(database_url, str):
        raise DatabaseConnectionError("Database URL must be a non-empty string")

    try:
        url = make_url(database_url)
    except ArgumentError as e:
        raise DatabaseConnectionError(f"Invalid database URL: {e}") from e

    logger.info(
        "Initializing database",
        extra={
            "event": "database.initializing",
            "database_url": url.render_as_string(hide_password=True),
        },
    )

    if _engine is not None:
        close_database()

    try:
        is_sqlite = url.get_backend_name() == "sqlite"
        in_memory = is_sqlite and url.database in (None, "", ":memory:")

        if is_sqlite and not in_memory:
            db_file = Path(url.database)
            if not db_file.parent.exists():
                logger.info(f"Creating database directory: {db_file.parent}")
                db_file.parent.mkdir(parents=True, exist_ok=True)

        engine_kwargs = {"pool_pre_ping": True}
        if is_sqlite:
            engine_kwargs["connect_args"] = {
                "check_same_thread": False,
                "timeout": SQLITE_BUSY_TIMEOUT,
            }
            if in_memory:
                engine_kwargs["poolclass"] = StaticPool

        engine = create_engine(url, **engine_kwargs)

        if is_sqlite:
            _configure_sqlite(engine, journal_wal=not in_memory)

        _validate_connection(engine)

        from .schema import create_schema

        create_schema(engine)

        _engine = engine
        _session_factory = sessionmaker(
            bind=engine,
            autoflush=True,
            expire_on_commit=False,
        )

        logger.info(
            "Database initialized successfully",
            extra={
                "event": "database.initialised",
                "dialect": engine.dialect.name,
                "in_memory": in_memory,
            },
        )

    except DatabaseConnectionError:
        raise
    except Exception as e:
        error_msg = f"Failed to initialize database: {e}"
        logger.error(error_msg, exc_info=True, extra={"event": "database.init_failed"})
        raise DatabaseConnectionError(error_msg) from e


def _configure_sqlite(engine: Engine, journal_wal: bool) -> None:
    """Install per-connection SQLite pragmas."""

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        if journal_wal:
            cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()


def _validate_connection(engine: Engine) -> None:
    """Run a trivial query to prove the database is reachable.

    Raises:
        DatabaseConnectionError: If the query fails
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        logger.debug("Database connection validated successfully")
    except Exception as e:
        raise DatabaseConnectionError(f"Failed to validate database connection: {e}") from e


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Provide a session that commits on success and rolls back on error.

    Yields:
        Session: SQLAlchemy session

    Raises:
        DatabaseConnectionError: If the database is not initialized
        PersistenceError: If a database error occurs, including on commit

    Example:
        >>> with get_session() as session:
        ...     RoleLibraryRepository(session).get_by_key("sales rep")
    """
    if _session_factory is None:
        raise DatabaseConnectionError(
            "Database not initialized. Call init_database() before using get_session()"
        )

    session = _session_factory()
    try:
        yield session
        session.commit()
    except SQLAlchemyError as e:
        # also covers failures raised by commit() itself, e.g. "database is locked"
        session.rollback()
        logger.warning(
            f"Database session rolled back due to database error: {e}",
            extra={
                "event": "database.session.rolled_back",
                "error_type": type(e).__name__,
            },
        )
        if isinstance(e, IntegrityError):
            raise DataIntegrityError(f"Database constraint violated: {e}") from e
        if isinstance(e, OperationalError):
            raise DatabaseConnectionError(f"Database unavailable: {e}") from e
        raise PersistenceError(f"Database operation failed: {e}") from e
    except Exception as e:
        session.rollback()
        logger.warning(
            f"Database session rolled back due to exception: {e}",
            extra={
                "event": "database.session.rolled_back",
                "error_type": type(e).__name__,
            },
        )
        raise
    finally:
        session.close()


def get_engine() -> Engine:
    """Get the database engine instance.

    Raises:
        DatabaseConnectionError: If the database is not initialized
    """
    if _engine is None:
        raise DatabaseConnectionError(
            "Database not initialized. Call init_database() before using get_engine()"
        )
    return _engine


def close_database() -> None:
    """Dispose of the engine and forget the session factory."""
    global _engine, _session_factory

    if _engine is not None:
        logger.info("Closing database connections", extra={"event": "database.closing"})
        _engine.dispose()
        _engine = None
        _session_factory = None
