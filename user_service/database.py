"""Database configuration and session management."""

import logging
import math
import time
from collections.abc import Callable, Generator, Iterator
from contextlib import contextmanager
from typing import Any

from fastapi import Request
from sqlalchemy import Engine, create_engine, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from user_service.errors import OperationTimeout

logger = logging.getLogger(__name__)

Base: Any = declarative_base()

# SQLSTATE for a statement cancelled by statement_timeout
PG_QUERY_CANCELED = "57014"
# Virtual machine steps between deadline checks on SQLite
SQLITE_PROGRESS_STEPS = 1000
# pysqlite's default lock wait
SQLITE_BUSY_TIMEOUT_MS = 5000


def build_engine(database_url: str) -> Engine:
    """Create an engine suited to the configured backend."""
    if database_url.startswith("sqlite"):
        return create_engine(database_url, connect_args={"check_same_thread": False})
    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request) -> Generator[Session, None, None]:
    """Dependency that provides a database session."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def init_db(engine: Engine) -> None:
    """Initialize the database by creating all tables."""
    # Import all models here so they are registered with Base.metadata
    from user_service import models  # noqa: F401

    Base.metadata.create_all(bind=engine)


class Deadline:
    """Point in time by which a request-scoped operation must finish."""

    def __init__(self, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        self.expires_at = time.monotonic() + timeout_seconds

    @property
    def remaining(self) -> float:
        return max(0.0, self.expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        return time.monotonic() >= self.expires_at

    def check(self) -> None:
        if self.expired:
            raise OperationTimeout(f"Operation exceeded {self.timeout_seconds:g}s deadline")


def no_limit() -> None:
    pass


def limit_statements(db: Session, deadline: Deadline) -> Callable[[], None]:
    """Make the database abandon statements still running when the deadline passes.

    Returns a callback that lifts the limit again; it must run before the
    connection goes back to the pool.
    """
    remaining_ms = max(1, math.ceil(deadline.remaining * 1000))
    dialect = db.get_bind().dialect.name

    if dialect == "postgresql":
        # Scoped to the current transaction
        db.execute(
            text("SELECT set_config('statement_timeout', :timeout, true)"),
            {"timeout": f"{remaining_ms}ms"},
        )
        return no_limit

    if dialect == "sqlite":
        raw = db.connection().connection.dbapi_connection
        raw.set_progress_handler(lambda: int(deadline.expired), SQLITE_PROGRESS_STEPS)
        raw.execute(f"PRAGMA busy_timeout = {remaining_ms}")

        def release() -> None:
            raw.set_progress_handler(None, 0)
            raw.execute(f"PRAGMA busy_timeout = {SQLITE_BUSY_TIMEOUT_MS}")

        return release

    logger.debug(f"No statement timeout support for {dialect}")
    return no_limit


def is_cancellation(error: OperationalError) -> bool:
    """Whether the database aborted a statement because its time limit ran out."""
    return (
        getattr(error.orig, "pgcode", None) == PG_QUERY_CANCELED
        or "interrupted" in str(error.orig)
    )


@contextmanager
def transaction(db: Session, deadline: Deadline | None = None) -> Iterator[Session]:
    """Run a unit of work: commit on success, roll back on every other exit.

    With a deadline, statements still running when it passes are cancelled by
    the database, and the deadline is checked again right before commit so that
    an operation which ran out of time never becomes visible.
    """
    release: Callable[[], None] = no_limit
    try:
        if deadline is not None:
            release = limit_statements(db, deadline)
        yield db
        if deadline is not None:
            deadline.check()
        release()
        db.commit()
    except OperationalError as e:
        release()
        db.rollback()
        if deadline is not None and (deadline.expired or is_cancellation(e)):
            raise OperationTimeout(
                f"Statement cancelled after {deadline.timeout_seconds:g}s deadline"
            ) from e
        raise
    except BaseException:
        release()
        db.rollback()
        raise
