"""Database helpers for the Draco API."""

from __future__ import annotations

import logging
from collections.abc import Generator

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from sqlalchemy.orm import Session, sessionmaker

from draco_api.common.problem_details import ApiError
from draco_api.core.auth.errors import AuthenticationError, PermissionDeniedError
from draco_api.core.rbac.errors import RoleError
from draco_api.settings import Settings, get_settings
from draco_db import Base
from draco_db.engine import build_engine

logger = logging.getLogger(__name__)

_EXPECTED_ERRORS = (
    HTTPException,
    RequestValidationError,
    AuthenticationError,
    PermissionDeniedError,
    RoleError,
)


def init_db(app: FastAPI, settings: Settings | None = None, *, create_schema: bool = False) -> None:
    settings = settings or get_settings()

    existing_engine = getattr(app.state, "db_engine", None)
    if existing_engine is not None:
        existing_engine.dispose()

    engine = build_engine(settings)
    if create_schema:
        import draco_db.models  # noqa: F401 - register mappers

        Base.metadata.create_all(engine)

    app.state.db_engine = engine
    app.state.db_sessionmaker = sessionmaker(bind=engine, expire_on_commit=False)


def shutdown_db(app: FastAPI) -> None:
    engine = getattr(app.state, "db_engine", None)
    if engine is not None:
        engine.dispose()
    app.state.db_engine = None
    app.state.db_sessionmaker = None


def get_session_factory_from_app(app: FastAPI) -> sessionmaker[Session]:
    session_factory = getattr(app.state, "db_sessionmaker", None)
    if session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db(app, ...) at startup.")
    return session_factory


def _log_unexpected_db_exception(request: Request, exc: BaseException) -> None:
    if isinstance(exc, _EXPECTED_ERRORS):
        return
    if isinstance(exc, ApiError) and exc.status_code < 500:
        return
    logger.warning(
        "db.session.rollback",
        extra={"path": str(request.url.path), "method": request.method},
        exc_info=exc,
    )


def get_db_session(request: Request) -> Generator[Session]:
    """Request-scoped session: commit on success, roll back on any error."""

    session = get_session_factory_from_app(request.app)()
    try:
        yield session
        session.commit()
    except BaseException as exc:
        session.rollback()
        _log_unexpected_db_exception(request, exc)
        raise
    finally:
        session.close()


__all__ = [
    "get_db_session",
    "get_session_factory_from_app",
    "init_db",
    "shutdown_db",
]
