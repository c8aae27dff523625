"""FastAPI application entry point."""
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from api.routers import categories, comments, health, prompts, users
from core.config import get_settings
from core.feed_cache import FeedCache, set_feed_cache
from core.redis import RedisClient, set_redis_client
from services.exceptions import (
    ForbiddenError,
    NotFoundError,
    TransientStorageError,
    ValidationFailedError,
)

logger = logging.getLogger(__name__)

STORAGE_UNAVAILABLE = {"detail": "Storage temporarily unavailable"}


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan - startup and shutdown."""
    app_settings = get_settings()

    # Startup: Connect to Redis
    redis_client = RedisClient(
        url=app_settings.redis_url,
        enabled=app_settings.redis_enabled,
        pool_size=app_settings.redis_pool_size,
    )
    await redis_client.connect()
    set_redis_client(redis_client)

    # Startup: Initialize feed cache
    set_feed_cache(FeedCache(redis_client, ttl_seconds=app_settings.feed_cache_ttl_seconds))

    yield

    # Shutdown: Clean up feed cache and Redis
    set_feed_cache(None)
    await redis_client.close()
    set_redis_client(None)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process request and add security headers to response."""
        response = await call_next(request)
        # HSTS: enforce HTTPS for 1 year, including subdomains
        response.headers["Strict-Transport-Security"] = (
            "max-age=31536000; includeSubDomains"
        )
        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"
        # Prevent clickjacking - API shouldn't be framed
        response.headers["X-Frame-Options"] = "DENY"
        return response


class UnexpectedErrorMiddleware(BaseHTTPMiddleware):
    """
    Map exceptions no handler claimed to a 503.

    The error is logged server-side; the client only sees the generic
    storage-unavailable body.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process request, converting unhandled exceptions into 503 responses."""
        try:
            return await call_next(request)
        except Exception:
            logger.exception(
                "unhandled_error method=%s path=%s", request.method, request.url.path,
            )
            return JSONResponse(status_code=503, content=STORAGE_UNAVAILABLE)


app_settings = get_settings()

app = FastAPI(
    title="Prompts API",
    description="Community prompt sharing with discovery feed, upvotes, bookmarks and comments.",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(NotFoundError)
async def not_found_exception_handler(_request: Request, exc: NotFoundError) -> JSONResponse:
    """Handle missing (or invisible) prompts and comments."""
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ForbiddenError)
async def forbidden_exception_handler(_request: Request, exc: ForbiddenError) -> JSONResponse:
    """Handle modification attempts on resources owned by another user."""
    return JSONResponse(status_code=403, content={"detail": str(exc)})


@app.exception_handler(ValidationFailedError)
async def validation_failed_exception_handler(
    _request: Request, exc: ValidationFailedError,
) -> JSONResponse:
    """Handle input that passed schema parsing but is still invalid."""
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(TransientStorageError)
async def transient_storage_exception_handler(
    request: Request, exc: TransientStorageError,
) -> JSONResponse:
    """Handle storage outages and timeouts. Safe for the client to retry."""
    logger.warning(
        "storage_unavailable method=%s path=%s error=%s",
        request.method,
        request.url.path,
        exc,
    )
    return JSONResponse(status_code=503, content=STORAGE_UNAVAILABLE)


@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Handle unexpected database errors without leaking internal detail."""
    logger.error(
        "database_error method=%s path=%s", request.method, request.url.path, exc_info=exc,
    )
    return JSONResponse(status_code=503, content=STORAGE_UNAVAILABLE)


# Unexpected errors middleware (innermost, so security and CORS headers still apply)
app.add_middleware(UnexpectedErrorMiddleware)

# Security headers middleware (runs after CORS, adds headers to responses)
app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(prompts.router)
app.include_router(comments.router)
app.include_router(users.router)
app.include_router(categories.router)
