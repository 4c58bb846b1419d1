"""
FastAPI host process for the privacy reminder job.

Builds the application context on startup, runs the reminder scheduler as a
background task, and exposes health and debug endpoints.
"""

import asyncio
import contextlib
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import Settings, get_settings
from app.context import AppContext, create_app_context
from app.infrastructure.observability.logging import get_logger, setup_logging
from app.middleware import HTTPSEnforcementMiddleware
from app.routes import debug, health

logger = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    context: AppContext | None = None,
    start_scheduler: bool | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to use, defaults to the environment
        context: Pre-built context; when given it is used as-is and not closed
        start_scheduler: Override REMINDER_SCHEDULER_ENABLED
    """
    settings = settings or (context.settings if context else get_settings())
    if start_scheduler is None:
        start_scheduler = settings.REMINDER_SCHEDULER_ENABLED

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Application starting", environment=settings.environment, debug=settings.debug)

        owns_context = context is None
        app_context = context or await create_app_context(settings)
        app.state.context = app_context

        scheduler_task = None
        if start_scheduler:
            scheduler_task = asyncio.create_task(app_context.reminder_job.run_forever())

        yield

        logger.info("Application shutting down")

        if scheduler_task is not None:
            scheduler_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await scheduler_task

        if owns_context:
            await app_context.close()

    app = FastAPI(
        title="CovEd Privacy Reminder",
        description="Scheduled privacy reminder emails for verified mentees",
        version="0.1.0",
        lifespan=lifespan,
    )

    if settings.environment == "production":
        app.add_middleware(HTTPSEnforcementMiddleware)

    app.include_router(health.router)
    if settings.environment != "production":
        app.include_router(debug.router, prefix="/debug")

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"status": exc.status_code, "message": exc.detail},
        )

    @app.exception_handler(Exception)
    async def server_error_handler(request: Request, exc: Exception):
        logger.error(
            "The server errored when processing a request",
            path=request.url.path,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return JSONResponse(status_code=500, content={"status": 500, "message": str(exc)})

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log HTTP requests with timing."""
        start_time = time.time()
        response = await call_next(request)
        process_time = (time.time() - start_time) * 1000

        logger.info(
            "HTTP request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round(process_time, 2),
        )
        return response

    return app


setup_logging(log_level=get_settings().LOG_LEVEL)
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=get_settings().PORT)
