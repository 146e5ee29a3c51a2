import time
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from app.salesdesk.core.config import settings

connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False}

engine = create_engine(settings.DATABASE_URL, echo=False, future=True, connect_args=connect_args)

# Mutable holder so time added from worker threads is visible to the request.
_db_time_ms: ContextVar[list[float] | None] = ContextVar("db_time_ms", default=None)


def start_db_timer() -> object:
    return _db_time_ms.set([0.0])


def stop_db_timer(token: object) -> None:
    _db_time_ms.reset(token)


def get_db_time_ms() -> float | None:
    holder = _db_time_ms.get()
    return holder[0] if holder is not None else None


@event.listens_for(engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    if engine.dialect.name != "sqlite":
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@event.listens_for(engine, "before_cursor_execute")
def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    if _db_time_ms.get() is None:
        return
    conn.info["query_start_time"] = time.perf_counter()


@event.listens_for(engine, "after_cursor_execute")
def _after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    holder = _db_time_ms.get()
    if holder is None:
        return
    start = conn.info.pop("query_start_time", None)
    if start is None:
        return
    holder[0] += (time.perf_counter() - start) * 1000

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def scoped_transaction(db: Session) -> Iterator[Session]:
    """Run a multi-step write as one unit.

    Commits when the block exits normally and rolls back on any exception,
    which is re-raised unchanged.
    """
    try:
        yield db
        db.commit()
    except BaseException:
        db.rollback()
        raise
