"""Centralized FastAPI exception handlers with structured logging."""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from draco_api.common.logging import log_context
from draco_api.common.problem_details import (
    ApiError,
    ProblemDetailsErrorItem,
    build_problem_details,
    error_items_from_pydantic,
    resolve_error_definition,
)

_UNHANDLED_LOGGER = logging.getLogger("draco_api.errors")
_HTTP_LOGGER = logging.getLogger("draco_api.http")
_PROBLEM_MEDIA_TYPE = "application/problem+json"


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "correlation_id", None)


def problem_response(
    *,
    request: Request,
    status_code: int,
    detail: str | dict[str, object] | None,
    errors: list[ProblemDetailsErrorItem] | None = None,
    error_type: str | None = None,
    title: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    problem = build_problem_details(
        status_code=status_code,
        instance=str(request.url.path),
        request_id=_request_id(request),
        detail=detail,
        errors=errors,
        error_type=error_type,
        title=title,
    )
    return JSONResponse(
        status_code=problem.status,
        content=problem.model_dump(mode="json"),
        media_type=_PROBLEM_MEDIA_TYPE,
        headers=headers,
    )


def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected exceptions.

    The client receives an opaque 500; the stack trace only goes to the log.
    """
    _UNHANDLED_LOGGER.exception(
        "unhandled_exception",
        extra=log_context(
            path=str(request.url.path),
            method=request.method,
            exception_type=type(exc).__name__,
        ),
    )
    return problem_response(
        request=request,
        status_code=500,
        detail="Internal server error",
        error_type=resolve_error_definition(500).type,
    )


def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for FastAPI HTTPException instances (5xx are logged)."""
    if exc.status_code >= 500:
        _HTTP_LOGGER.error(
            "http_exception",
            extra=log_context(
                path=str(request.url.path),
                method=request.method,
                status_code=exc.status_code,
            ),
        )
    detail = exc.detail if isinstance(exc.detail, (str, dict)) else None
    if exc.status_code == 500:
        detail = "Internal server error"
    return problem_response(
        request=request,
        status_code=exc.status_code,
        detail=detail,
        headers=getattr(exc, "headers", None),
    )


def request_validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    return problem_response(
        request=request,
        status_code=422,
        detail="Invalid request",
        errors=error_items_from_pydantic(list(exc.errors())),
        error_type=resolve_error_definition(422).type,
    )


def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return problem_response(
        request=request,
        status_code=exc.status_code,
        detail=exc.detail,
        errors=exc.errors,
        error_type=exc.error_type,
        title=exc.title,
        headers=exc.headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the Problem Details handlers on ``app``."""

    app.add_exception_handler(ApiError, api_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(
        RequestValidationError,
        request_validation_exception_handler,  # type: ignore[arg-type]
    )
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = [
    "api_error_handler",
    "http_exception_handler",
    "problem_response",
    "register_exception_handlers",
    "request_validation_exception_handler",
    "unhandled_exception_handler",
]
