"""FastAPI application factory for the task tracker."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import TaskSettings, settings
from .errors import NotFoundError, TaskTrackerError, ValidationError
from .services.task_store import TaskStore

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse({"success": False, "error": message, **extra}, status_code=status_code)


async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return _error(400, exc.message, code=exc.code)


async def _not_found_error(request: Request, exc: NotFoundError) -> JSONResponse:
    return _error(404, str(exc))


async def _tracker_error(request: Request, exc: TaskTrackerError) -> JSONResponse:
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return _error(500, str(exc))


async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if any(err.get("loc", ())[-1:] == ("due_date",) for err in errors):
        return _error(400, "Invalid due date format")
    first = errors[0] if errors else {}
    return _error(400, first.get("msg", "Invalid request body"))


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return _error(404, "Route not found", path=request.url.path)
    return _error(exc.status_code, str(exc.detail))


def create_app(store: TaskStore | None = None, app_settings: TaskSettings | None = None) -> FastAPI:
    """Build the API around an explicit store instance.

    The store is opened on startup and closed on shutdown. Handlers reach it
    through ``database.get_store``.
    """
    cfg = app_settings or settings
    task_store = store or TaskStore(cfg.database_url, echo=cfg.echo_sql)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Initializing database...")
        await task_store.initialize()
        yield
        await task_store.close()

    app = FastAPI(title=cfg.app_title, lifespan=lifespan)
    app.state.store = task_store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins_list,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["Content-Type"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info("%s %s -> %s (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
        return response

    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(NotFoundError, _not_found_error)
    app.add_exception_handler(TaskTrackerError, _tracker_error)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(StarletteHTTPException, _http_error)

    from .routers import health, tasks

    app.include_router(tasks.router, prefix=cfg.api_prefix)
    app.include_router(health.router)
    return app


app = create_app()
