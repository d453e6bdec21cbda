"""Draco FastAPI application factory."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .common.exceptions import register_exception_handlers
from .common.logging import setup_logging
from .common.middleware import register_middleware
from .core.http.errors import register_auth_exception_handlers
from .core.rbac.catalog import RoleCatalog, default_catalog
from .db import init_db, shutdown_db
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    catalog: RoleCatalog | None = None,
    create_schema: bool = False,
) -> FastAPI:
    """Return a configured FastAPI application.

    Routers are mounted by the caller; this wires logging, error handling, the
    database and the role catalog shared by every guard.
    """

    settings = settings or get_settings()
    setup_logging(settings)
    catalog = catalog or default_catalog()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "draco_api.startup",
            extra={"app_version": settings.app_version, "role_count": len(catalog)},
        )
        yield
        shutdown_db(app)
        logger.info("draco_api.shutdown")

    app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)
    app.state.settings = settings
    app.state.role_catalog = catalog

    init_db(app, settings, create_schema=create_schema)
    register_middleware(app)
    register_exception_handlers(app)
    register_auth_exception_handlers(app)
    return app


__all__ = ["create_app"]
