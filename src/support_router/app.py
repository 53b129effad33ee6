from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from support_router.api.middleware.correlation_id import CorrelationIdMiddleware
from support_router.api.middleware.timing import RequestTimingMiddleware
from support_router.api.v1.routers import events, health, participants, queue
from support_router.application.exceptions import (
    AppError,
    ConflictError,
    InvalidArgumentError,
    InvalidOperationError,
    NotFoundError,
    StorageError,
)
from support_router.config import settings
from support_router.infrastructure.db.session import create_tables, dispose_engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    if settings.DB_CREATE_TABLES:
        await create_tables()
    logger.info(
        "Routing service ready (queue=%s, clear_language_on_session_end=%s)",
        settings.QUEUE_BACKEND,
        settings.CLEAR_LANGUAGE_ON_SESSION_END,
    )
    try:
        yield
    finally:
        await dispose_engine()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Support Router",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestTimingMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(events.router)
    app.include_router(participants.router)
    app.include_router(queue.router)

    return app


_STATUS_BY_ERROR: dict[type[AppError], int] = {
    NotFoundError: 404,
    InvalidOperationError: 409,
    ConflictError: 409,
    InvalidArgumentError: 422,
    StorageError: 503,
}


def _status_for(exc: AppError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in _STATUS_BY_ERROR:
            return _STATUS_BY_ERROR[error_type]
    return 400


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def _app_error(request: Request, exc: AppError) -> JSONResponse:
        status_code = _status_for(exc)
        if isinstance(exc, StorageError):
            logger.error("Storage failure on %s: %s", request.url.path, exc.detail)
            return JSONResponse(status_code=status_code, content={"detail": "Storage unavailable"})
        logger.info("%s on %s: %s", type(exc).__name__, request.url.path, exc.detail)
        return JSONResponse(status_code=status_code, content={"detail": exc.detail})
