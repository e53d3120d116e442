"""SQLAlchemy engine, session factory, declarative base and transaction scope."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from truthmeter.core.config import DatabaseSettings, settings
from truthmeter.core.errors import AppError, StorageAppError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


def create_db_engine(url: str | None = None, db_settings: DatabaseSettings | None = None) -> Engine:
    """Create an engine for ``url`` (defaults to the configured database)."""

    cfg = db_settings or settings.db
    url = url or cfg.url

    engine_kwargs: dict[str, Any] = {"echo": cfg.echo, "future": True}
    if url.startswith("sqlite"):
        # Threads share the engine; each writer waits for the file lock instead of failing.
        engine_kwargs["connect_args"] = {
            "check_same_thread": False,
            "timeout": cfg.busy_timeout_seconds,
        }

    engine = create_engine(url, **engine_kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create tables and indexes that do not exist yet."""

    # Import models so they register on Base.metadata
    from truthmeter import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("db.initialized", extra={"dialect": engine.dialect.name})


@contextmanager
def session_scope(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    """Run one unit of work in a single transaction.

    Commits when the block exits normally. Any exception rolls the whole
    transaction back; domain errors propagate unchanged and database errors
    are wrapped in an opaque ``StorageAppError``.
    """

    session = session_factory()
    try:
        yield session
        session.commit()
    except AppError:
        session.rollback()
        raise
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error(
            "db.transaction_failed",
            extra={"error_type": type(exc).__name__},
            exc_info=True,
        )
        raise StorageAppError(
            code="storage_error",
            message="The operation could not be completed. Please try again later.",
        ) from exc
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
