"""
Verification Service - Main Application
========================================

FastAPI application relaying World ID proofs to the verification authority.

Version: 0.1.0
"""

import uuid
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Annotated, Any

from fastapi import Depends, FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from services.verification.routes import verification
from shared.config import RateLimitBackend, settings
from shared.database.redis import RedisClient
from shared.logging import bind_context, clear_context, get_logger, setup_logging
from shared.models.common import ErrorResponse, HealthResponse
from shared.ratelimit import RateLimiter, get_rate_limiter
from shared.worldid import close_worldid_verifier


# Setup logging
setup_logging(
    log_level=settings.log_level.value,
    json_logs=settings.is_production,
    service_name="verification",
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> Any:
    """Application lifespan manager."""
    logger.info(
        "verification_service_starting",
        environment=settings.environment.value,
        port=settings.port,
        app_id=settings.worldid.app_id,
        rate_limit_backend=settings.rate_limit.backend.value,
    )

    if not settings.worldid.has_api_key:
        # Not fatal: every upstream call will fail authentication instead.
        logger.warning("worldid_api_key_not_configured")

    yield

    # Shutdown
    logger.info("verification_service_shutting_down")
    await close_worldid_verifier()
    if settings.rate_limit.backend == RateLimitBackend.REDIS:
        await RedisClient.close()


# Create FastAPI application
app = FastAPI(
    title="Human Verification Relay",
    description="Validates World ID proofs with the verification authority",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins_list,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=["POST", "GET", "OPTIONS"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Bind a request ID to every log line emitted while handling a request."""
    clear_context()
    bind_context(
        request_id=request.headers.get("x-request-id") or uuid.uuid4().hex,
        path=request.url.path,
        method=request.method,
    )
    return await call_next(request)


# ============================================================================
# Health Check Endpoints
# ============================================================================


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(
    limiter: Annotated[RateLimiter, Depends(get_rate_limiter)],
) -> HealthResponse:
    """
    Service health check.

    Reports whether the authority credential is configured and the state of
    the rate limiter backend.
    """
    components: dict[str, dict[str, Any]] = {
        "worldid": {
            "status": "healthy" if settings.worldid.has_api_key else "unconfigured",
            "app_id": settings.worldid.app_id,
        },
        "rate_limiter": {
            "status": "healthy",
            "enabled": settings.rate_limit.enabled,
            "backend": limiter.backend,
        },
    }

    if settings.rate_limit.backend == RateLimitBackend.REDIS:
        components["redis"] = await RedisClient.health_check()

    health = HealthResponse(
        service="verification",
        version="0.1.0",
        components=components,
    )
    if not health.is_healthy:
        health.status = "degraded"

    return health


@app.get("/", tags=["Health"])
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "service": "Human Verification Relay",
        "version": "0.1.0",
        "docs": "/docs",
    }


# ============================================================================
# Include Routers
# ============================================================================

app.include_router(
    verification.router,
    prefix="/api",
    tags=["Verification"],
)


# ============================================================================
# Error Handlers
# ============================================================================


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions, including routing 404/405."""
    logger.warning(
        "http_exception",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
    )

    message = str(exc.detail)
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        message = "Method not allowed. Use POST."

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(message=message).to_content(),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            message="Internal server error",
            error=str(exc) if settings.expose_error_details else None,
        ).to_content(),
    )


# ============================================================================
# Run with Uvicorn
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "services.verification.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.value.lower(),
    )
