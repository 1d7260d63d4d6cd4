"""
FastAPI application factory.

create_app() wires the TaskVault components once, mounts the routers and
installs the exception handlers that turn typed TaskVault errors into
HTTP responses. Error bodies are always {"message": "..."}.
"""

from __future__ import annotations

import time
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskvault.app import TaskVaultApp
from taskvault.utils.config import Settings
from taskvault.utils.exceptions import AuthenticationError, RateLimitError, TaskVaultError
from taskvault.utils.logger import get_logger

from . import auth_routes, todo_routes

logger = get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal Server Error"


def _message(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message}, headers=headers)


async def taskvault_error_handler(request: Request, exc: TaskVaultError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "Request failed",
            method=request.method,
            path=request.url.path,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        return _message(exc.status_code, INTERNAL_ERROR_MESSAGE)

    if isinstance(exc, AuthenticationError):
        logger.info(
            "Authentication rejected",
            path=request.url.path,
            reason=type(exc).__name__,
        )
        return _message(
            exc.status_code,
            AuthenticationError.public_message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    headers = None
    if isinstance(exc, RateLimitError) and exc.retry_after:
        headers = {"Retry-After": str(exc.retry_after)}
    return _message(exc.status_code, exc.message, headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.debug("Request body rejected", path=request.url.path, errors=len(exc.errors()))
    return _message(status.HTTP_400_BAD_REQUEST, "Invalid request body")


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _message(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error",
        method=request.method,
        path=request.url.path,
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return _message(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


def create_app(
    settings: Optional[Settings] = None, taskvault: Optional[TaskVaultApp] = None
) -> FastAPI:
    """
    Build the FastAPI app.

    Args:
        settings: Explicit settings; loaded from the environment when omitted
        taskvault: Pre-built component container (tests swap parts of it)
    """
    if taskvault is None:
        taskvault = TaskVaultApp(settings).initialize()

    app = FastAPI(title="TaskVault", version="1.0.0")
    app.state.taskvault = taskvault

    app.add_middleware(
        CORSMiddleware,
        allow_origins=taskvault.settings.web.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "Request handled",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
            principal_id=getattr(request.state, "principal_id", None),
        )
        return response

    app.add_exception_handler(TaskVaultError, taskvault_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    @app.get("/health")
    async def health() -> dict:
        return {"status": "OK"}

    app.include_router(auth_routes.router)
    app.include_router(todo_routes.router)
    return app
