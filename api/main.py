"""Tracewise API Service.

FastAPI application exposing the troubleshooting agent over HTTP.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from api.models import HealthResponse
from api.routers import chat as chat_router
from api.schemas.routing import now_ms
from libs.caching.redis_client import close_redis_client
from libs.caching.redis_client import health_check as redis_health_check
from libs.common.settings import get_settings

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(),
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Release the shared Redis connection pool on shutdown."""
    yield
    await close_redis_client()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    logging.basicConfig(level=settings.log_level, format="%(message)s")

    app = FastAPI(
        title="Tracewise Observability Agent API",
        description="Conversational troubleshooting for serverless Workers with semantic memory",
        version=settings.version,
        default_response_class=ORJSONResponse,
        debug=settings.debug,
        lifespan=lifespan,
    )

    cors_origins = ["*"] if settings.is_development else settings.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=False if settings.is_development else True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Reject malformed bodies with 400 and a short reason."""
        errors = exc.errors()
        first = errors[0] if errors else {}
        return ORJSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": "Invalid request",
                "message": first.get("msg", "Invalid request"),
                "field": ".".join(str(part) for part in first.get("loc", ())[1:]) or None,
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error("Unhandled request error", path=request.url.path, error=str(exc), exc_info=True)
        return ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error", "message": "Please try again later."},
        )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all requests with timing and structured data."""
        start_time = time.time()
        request_id = f"req_{int(start_time * 1000000)}"
        request.state.request_id = request_id

        logger.info("Request started", request_id=request_id, method=request.method, path=request.url.path)

        response = await call_next(request)
        logger.info(
            "Request completed",
            request_id=request_id,
            status_code=response.status_code,
            process_time_ms=round((time.time() - start_time) * 1000, 2),
        )
        response.headers["X-Request-ID"] = request_id
        return response

    app.include_router(chat_router.router, prefix="/api", tags=["Chat"])

    @app.get("/api/health", response_model=HealthResponse, tags=["Health"])
    async def health() -> HealthResponse:
        """Liveness check; reports degraded when Redis is unreachable."""
        storage_ok = await redis_health_check()
        return HealthResponse(
            status="healthy" if storage_ok else "degraded",
            timestamp=now_ms(),
            version=settings.version,
            storage=storage_ok,
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
