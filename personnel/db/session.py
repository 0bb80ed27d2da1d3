from __future__ import annotations

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from personnel.settings import get_settings


def build_engine(db_url: str, echo: bool = False) -> Engine:
    """
    Create an engine for `db_url`.

    SQLite only enforces ON DELETE CASCADE when `foreign_keys` is switched on,
    and the pragma is per-connection, so it is issued on every new DBAPI connection.
    """

    kwargs: dict[str, Any] = {"echo": echo}
    is_sqlite = db_url.startswith("sqlite")
    if is_sqlite:
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in db_url or db_url in ("sqlite://", "sqlite+pysqlite://"):
            # One shared connection, otherwise each pooled connection sees its own empty database.
            kwargs["poolclass"] = StaticPool

    new_engine = create_engine(db_url, **kwargs)

    if is_sqlite:
        event.listen(new_engine, "connect", _enable_sqlite_foreign_keys)

    return new_engine


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


_settings = get_settings()

engine = build_engine(_settings.resolved_db_url(), echo=_settings.echo_sql)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, class_=Session)


def get_db() -> Generator[Session, None, None]:
    """
    Main DB dependency: one session per request, always closed.

    Repositories commit their own unit of work; nothing is left pending here.
    """

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
