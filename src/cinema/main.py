"""FastAPI application factory for Cinema.

This module creates and configures the FastAPI application with:
- Lifespan management of the shared service container
- Middleware configuration (CORS, request ID, logging)
- Exception handlers
- API routers
"""

import time
import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cinema.config import Settings, get_settings
from cinema.container import AppContainer
from cinema.core.exceptions import CinemaError
from cinema.core.logging import (
    clear_correlation_id,
    configure_logging,
    get_logger,
    set_correlation_id,
)
from cinema.schemas.common import HealthCheckResponse

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifespan events.

    Startup configures logging and starts the service container. The
    persistent store initialises in the background, so requests served
    before it is ready fall back to uncached/empty results.

    Args:
        app: The FastAPI application instance

    Yields:
        None: Control back to the application
    """
    settings: Settings = app.state.settings

    configure_logging(settings)
    startup_logger = get_logger(__name__)

    container = getattr(app.state, "container", None)
    if container is None:
        container = AppContainer(settings)
        app.state.container = container
    await container.start()

    startup_logger.info(
        "app_starting",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.app_env.value,
        debug=settings.debug,
    )

    yield

    await container.close()
    startup_logger.info("app_shutting_down", app_name=settings.app_name)


def create_app(
    settings: Settings | None = None, container: AppContainer | None = None
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings override for testing
        container: Optional pre-built container, started by the lifespan

    Returns:
        FastAPI: Configured application instance
    """
    if settings is None:
        settings = container.settings if container is not None else get_settings()

    app = FastAPI(
        title=settings.app_name,
        description=(
            "Movie catalog service: trending, now playing and search lists "
            "with a persistent response cache, bookmarks and deep links."
        ),
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    if container is not None:
        app.state.container = container

    configure_middleware(app, settings)
    configure_exception_handlers(app)
    configure_routes(app)

    return app


def configure_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure application middleware.

    Args:
        app: The FastAPI application instance
        settings: Application settings
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.is_development else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next: Any) -> Any:
        """Log requests and responses with correlation ID."""
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        request.state.request_id = request_id
        set_correlation_id(request_id)

        request_logger = get_logger("cinema.request")
        start_time = time.perf_counter()

        request_logger.info(
            "request_started",
            method=request.method,
            path=request.url.path,
            query=str(request.query_params) if request.query_params else None,
        )

        try:
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start_time) * 1000
            request_logger.info(
                "request_completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
            )
            response.headers["X-Request-ID"] = request_id
            return response

        except Exception as exc:
            duration_ms = (time.perf_counter() - start_time) * 1000
            request_logger.error(
                "request_failed",
                method=request.method,
                path=request.url.path,
                duration_ms=round(duration_ms, 2),
                error=str(exc),
            )
            raise

        finally:
            clear_correlation_id()


def configure_exception_handlers(app: FastAPI) -> None:
    """Configure global exception handlers.

    Args:
        app: The FastAPI application instance
    """
    exception_logger = get_logger("cinema.exceptions")

    @app.exception_handler(CinemaError)
    async def cinema_exception_handler(request: Request, exc: CinemaError) -> JSONResponse:
        """Render Cinema errors as ``{"error": {...}}`` with their status code."""
        request_id = getattr(request.state, "request_id", None)

        log = exception_logger.error if exc.status_code >= 500 else exception_logger.warning
        log(
            "request_error",
            error_code=exc.code,
            error_message=exc.message,
            status_code=exc.status_code,
            path=request.url.path,
        )

        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(request_id=request_id),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions with a consistent error response."""
        request_id = getattr(request.state, "request_id", None)

        exception_logger.exception(
            "unhandled_exception",
            error_type=type(exc).__name__,
            error_message=str(exc),
            path=request.url.path,
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "internal_error",
                    "message": "An unexpected error occurred",
                    "request_id": request_id,
                }
            },
        )


def configure_routes(app: FastAPI) -> None:
    """Configure application routes.

    Args:
        app: The FastAPI application instance
    """

    @app.get(
        "/health/live",
        tags=["Health"],
        summary="Liveness probe",
        description="Returns OK if the service is running",
    )
    async def liveness() -> dict[str, str]:
        return {"status": "ok"}

    @app.get(
        "/health/ready",
        response_model=HealthCheckResponse,
        tags=["Health"],
        summary="Readiness probe",
        description="Reports whether the persistent store is reachable",
    )
    async def readiness() -> HealthCheckResponse:
        """Readiness probe.

        The service keeps answering while the store initialises, so a
        store that is not ready yet degrades the status instead of failing.
        """
        from cinema.core.database import check_db_connection, is_db_ready

        if not is_db_ready():
            return HealthCheckResponse(status="degraded", checks={"database": "starting"})

        db_ok = await check_db_connection()
        return HealthCheckResponse(
            status="ok" if db_ok else "error",
            checks={"database": "ok" if db_ok else "error"},
        )

    @app.get("/", tags=["Root"], summary="API root")
    async def root(request: Request) -> dict[str, str]:
        settings: Settings = request.app.state.settings
        return {
            "service": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs",
            "health": "/health/live",
        }

    from cinema.api.v1.router import router as v1_router

    app.include_router(v1_router, prefix="/api/v1")


def cli() -> None:
    """CLI entry point for running the application."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "cinema.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.value.lower(),
    )


if __name__ == "__main__":
    cli()
