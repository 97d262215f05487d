"""Application factory and ASGI entry point for the task service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from taskservice.app.config import Settings, get_settings
from taskservice.app.core.errors import NotFoundError, StoreError, ValidationError
from taskservice.app.core.logging_config import configure_logging
from taskservice.app.deps import build_task_repository
from taskservice.ports.task_repository import ITaskRepository
from taskservice.routes import tasks as tasks_router

logger = logging.getLogger(__name__)

INTERNAL_ERROR_BODY = {"error": "Internal server error"}


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[ITaskRepository] = None,
) -> FastAPI:
    """Build the FastAPI app.

    When ``repository`` is given it is used as-is and left open on shutdown
    (the caller owns it). Otherwise the store is built from ``settings`` at
    startup and closed at shutdown.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned = app.state.task_repository is None
        if owned:
            app.state.task_repository = build_task_repository(settings)
        try:
            yield
        finally:
            if owned:
                app.state.task_repository.close()
                app.state.task_repository = None

    app = FastAPI(title="Task Service", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.task_repository = repository

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        logger.info(
            "rejected %s %s: %s",
            request.method,
            request.url.path,
            [error.message for error in exc.errors],
            extra={"op": "validate"},
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"errors": [error.as_dict() for error in exc.errors]},
        )

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        logger.info("task not found", extra={"task": exc.task_id, "op": request.method.lower()})
        return JSONResponse(status_code=exc.status_code, content={})

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        logger.error(
            "store failure on %s %s: %s (%r)",
            request.method,
            request.url.path,
            exc.message,
            exc.cause,
            exc_info=exc,
        )
        return JSONResponse(status_code=exc.status_code, content=INTERNAL_ERROR_BODY)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content=INTERNAL_ERROR_BODY)

    app.include_router(tasks_router.router)

    @app.get("/healthz")
    async def healthz() -> dict:
        return {"status": "ok"}

    return app


app = create_app()


def run() -> None:
    """Serve the app with uvicorn on the configured host and port."""
    settings = get_settings()
    uvicorn.run(
        "taskservice.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )
