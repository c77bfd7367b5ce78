"""SQLModel engine and session management for the archive index."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlmodel import Session, SQLModel, create_engine

from sounding_archive import models  # noqa: F401  (registers tables on SQLModel.metadata)
from sounding_archive.core.config import settings
from sounding_archive.core.errors import (
    ArchiveError,
    DuplicateKey,
    ReferentialViolation,
    StoreUnavailable,
)

logger = logging.getLogger(__name__)

_BEGIN_OPTION = "sqlite_begin"


def create_index_engine(
    db_path: str | Path,
    busy_timeout: float | None = None,
    journal_mode: str | None = None,
) -> Engine:
    """Create an engine for the SQLite index at ``db_path``.

    Foreign keys are enforced on every connection. Transactions are started
    explicitly so write sessions can take the write lock up front.
    """

    timeout = settings.sqlite_busy_timeout_seconds if busy_timeout is None else busy_timeout
    mode = (journal_mode or settings.sqlite_journal_mode).upper()
    engine = create_engine(
        f"sqlite:///{Path(db_path)}",
        echo=settings.echo_sql,
        connect_args={"timeout": timeout, "check_same_thread": False},
    )

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:
        # Let SQLAlchemy's "begin" hook issue BEGIN instead of the driver.
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute(f"PRAGMA journal_mode={mode}")
        finally:
            cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn) -> None:
        if conn.get_execution_options().get(_BEGIN_OPTION) == "IMMEDIATE":
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")

    return engine


def init_db(engine: Engine) -> None:
    try:
        SQLModel.metadata.create_all(engine)
    except SQLAlchemyError as exc:
        raise translate_error(exc) from exc
    logger.debug("Index schema ensured at %s", engine.url)


def translate_error(exc: SQLAlchemyError) -> ArchiveError:
    """Map a SQLAlchemy failure onto the archive's error conditions."""

    message = str(getattr(exc, "orig", None) or exc)
    if isinstance(exc, IntegrityError):
        if "UNIQUE constraint failed" in message:
            return DuplicateKey(message)
        if "FOREIGN KEY constraint failed" in message:
            return ReferentialViolation(message)
        return ArchiveError(message)
    if isinstance(exc, DBAPIError):
        return StoreUnavailable(message)
    return ArchiveError(message)


@contextmanager
def get_session(engine: Engine, write: bool = False) -> Iterator[Session]:
    """Get a session scoped to one transaction.

    Write sessions begin with ``BEGIN IMMEDIATE`` and commit when the block
    exits cleanly. Every exit path rolls back what was not committed and closes
    the session.
    """

    bind = engine.execution_options(**{_BEGIN_OPTION: "IMMEDIATE"}) if write else engine
    session = Session(bind, expire_on_commit=False)
    try:
        yield session
        if write:
            session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        raise translate_error(exc) from exc
    except BaseException:
        session.rollback()
        raise
    finally:
        session.close()


__all__ = ["create_index_engine", "get_session", "init_db", "translate_error"]
