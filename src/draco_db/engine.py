"""Shared database engine helpers."""

from __future__ import annotations

from typing import Any, Protocol

from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.pool import StaticPool


class DatabaseSettings(Protocol):
    database_url: str
    database_echo: bool


def _is_sqlite_memory(url: URL) -> bool:
    return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection: Any, _record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(settings: DatabaseSettings) -> Engine:
    """Create an engine for ``settings.database_url``.

    In-memory SQLite shares one connection across threads so every session
    sees the same database.
    """

    url = make_url(settings.database_url)
    kwargs: dict[str, Any] = {"echo": settings.database_echo}
    if url.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        if _is_sqlite_memory(url):
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True

    engine = create_engine(url, **kwargs)
    if url.get_backend_name() == "sqlite":
        enable_sqlite_foreign_keys(engine)
    return engine


__all__ = ["DatabaseSettings", "build_engine", "enable_sqlite_foreign_keys"]
