"""
BDC Screener - sector exposure and valuation screener for BDCs

Main FastAPI application entry point.
"""

import time
import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from app.api import router as api_router
from app.api import watchlist_router
from app.core.cache import check_rate_limit, close_redis
from app.core.config import ConfigurationError, get_settings

settings = get_settings()

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)
logger = structlog.get_logger()

ERROR_CODES = {
    400: "bad_request",
    404: "not_found",
    405: "method_not_allowed",
    429: "rate_limit_exceeded",
    503: "service_unavailable",
}

# Paths that skip rate limiting
UNLIMITED_PATHS = {"/", "/docs", "/redoc", "/openapi.json", "/v1/ping", "/v1/health"}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan manager."""
    # Startup
    logger.info("Starting BDC Screener API", version=settings.api_version)
    yield
    # Shutdown
    await close_redis()
    logger.info("Shutting down BDC Screener API")


# Create FastAPI app
app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    description=settings.api_description,
    default_response_class=ORJSONResponse,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# Add middleware
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


def client_ip(request: Request) -> str:
    """Client address, honouring X-Forwarded-For behind a proxy."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def error_response(status_code: int, message: str, code: str = None, headers: dict = None) -> ORJSONResponse:
    return ORJSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code or ERROR_CODES.get(status_code, "error"),
                "message": message,
            }
        },
        headers=headers,
    )


# Request logging middleware
@app.middleware("http")
async def logging_middleware(request: Request, call_next):
    """Log all requests with timing."""
    request_id = str(uuid.uuid4())[:8]
    start = time.perf_counter()

    response = await call_next(request)

    duration_ms = (time.perf_counter() - start) * 1000

    logger.info(
        "request",
        request_id=request_id,
        method=request.method,
        path=request.url.path,
        status=response.status_code,
        duration_ms=round(duration_ms, 2),
        client_ip=client_ip(request),
    )

    response.headers["X-Request-ID"] = request_id
    return response


# Rate limiting middleware
@app.middleware("http")
async def rate_limit_middleware(request: Request, call_next):
    """Apply rate limiting based on client IP."""
    path = request.url.path
    if path in UNLIMITED_PATHS:
        return await call_next(request)

    ip = client_ip(request)
    allowed, remaining, reset = await check_rate_limit(ip)

    if not allowed:
        logger.warning("rate_limit_exceeded", client_ip=ip, path=path)
        return error_response(
            429,
            f"Rate limit exceeded. Try again in {reset} seconds.",
            headers={
                "X-RateLimit-Limit": str(settings.rate_limit_requests),
                "X-RateLimit-Remaining": "0",
                "X-RateLimit-Reset": str(reset),
                "Retry-After": str(reset),
            },
        )

    response = await call_next(request)

    response.headers["X-RateLimit-Limit"] = str(settings.rate_limit_requests)
    response.headers["X-RateLimit-Remaining"] = str(remaining)
    response.headers["X-RateLimit-Reset"] = str(reset)

    return response


app.include_router(api_router, prefix="/v1")
app.include_router(watchlist_router, prefix="/v1")


# Root
@app.get("/", include_in_schema=False)
async def root():
    """API index."""
    return {
        "name": settings.api_title,
        "description": settings.api_description,
        "version": settings.api_version,
        "docs": "/docs",
        "screener": {
            "bdcs": "/v1/bdcs",
            "detail": "/v1/bdcs/{cik}",
            "sectors": "/v1/sectors",
        },
        "watchlist": {
            "list": "/v1/watchlist",
            "analyze": "/v1/watchlist/analyze",
        },
        "system": {
            "health": "/v1/health",
            "refresh_prices": "/v1/cron/refresh-prices",
        },
    }


# Error handlers
@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = str(exc.detail) if exc.detail else "Request failed"
    return error_response(exc.status_code, message, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else first.get("msg", "Invalid request")
    else:
        message = "Invalid request"
    return error_response(400, message, code="validation_error")


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error("configuration_error", path=request.url.path, error=str(exc))
    return error_response(503, str(exc), code="configuration_error")


@app.exception_handler(500)
async def internal_error_handler(request: Request, exc):
    logger.error("internal_error", error=str(exc))
    return error_response(500, "An internal error occurred", code="internal_error")
