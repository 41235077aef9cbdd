"""Application entry point and FastAPI app factory."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
import sys
from pathlib import Path

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .config.settings import settings
from .controllers import account_requests, auth, flights, profiles, realtime, reports, seals
from .database import dispose_engine, init_models, ping
from .errors import RateLimited, SealServiceError
from .middleware import StructuredLoggingMiddleware, TelemetryMiddleware
from .views import HealthResponse

logger = logging.getLogger(__name__)


_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_QUIET_LOGGERS = ("httpx", "httpcore", "asyncio", "sqlalchemy.engine")


def _rotating_handler(path: str, max_bytes: int, fmt: str = _LOG_FORMAT) -> RotatingFileHandler:
    log_path = Path(path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(log_path, maxBytes=max_bytes, backupCount=5, encoding="utf-8")
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _configure_logging() -> None:
    """Route application logs to stdout and the rotating files.

    Request lines go to stdout only; seal scan activity is also kept in its
    own file so a flight's scan history can be audited after the fact.
    """

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(logging.Formatter(_LOG_FORMAT))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(console)
    root_logger.addHandler(_rotating_handler(settings.log_file, 1_000_000))
    root_logger.setLevel(logging.DEBUG if settings.debug else logging.INFO)

    request_logger = logging.getLogger("trolleyseal.middleware.structured")
    request_logger.handlers.clear()
    request_console = logging.StreamHandler(sys.stdout)
    request_console.setFormatter(logging.Formatter("%(message)s"))
    request_logger.addHandler(request_console)
    request_logger.setLevel(logging.INFO)
    request_logger.propagate = False

    audit_logger = logging.getLogger("trolleyseal.services.seal_scans")
    audit_logger.handlers.clear()
    audit_logger.addHandler(
        _rotating_handler(settings.seal_log_file, 500_000, "%(asctime)s | %(levelname)s | %(message)s")
    )

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    _configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        description="Trolley seal checklist and report backend",
    )

    app.add_middleware(TelemetryMiddleware)
    app.add_middleware(StructuredLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    app.include_router(auth.router)
    app.include_router(profiles.router)
    app.include_router(account_requests.router)
    app.include_router(flights.router)
    app.include_router(seals.router)
    app.include_router(reports.router)
    app.include_router(realtime.router)

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, str]:
        """Root endpoint."""

        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.app_version,
            "status": "operational",
        }

    @app.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Connectivity check polled by clients for their status indicator."""

        connected = await ping()
        return HealthResponse(
            status="healthy" if connected else "degraded",
            service=settings.app_name,
            version=settings.app_version,
            connected=connected,
        )

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        """Expose application metrics for Prometheus scraping."""

        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.exception_handler(SealServiceError)
    async def seal_service_exception_handler(request, exc: SealServiceError):
        content = {"detail": exc.message, "code": exc.code}
        headers = None
        if isinstance(exc, RateLimited):
            content["retryAfter"] = exc.retry_after
            headers = {"Retry-After": str(exc.retry_after)}
        return JSONResponse(status_code=exc.status_code, content=content, headers=headers)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request, exc):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request, exc):
        logger.exception("Unhandled error for %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    @app.on_event("startup")
    async def startup_event() -> None:
        await init_models()

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        await dispose_engine()

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "trolleyseal.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
