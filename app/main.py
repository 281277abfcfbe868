# app/main.py
"""Picks API - FastAPI application entrypoint."""
import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import load_config, log_config_snapshot
from app.correlation import CorrelationIdMiddleware, RequestIdLogFilter, get_request_id
from app.errors import error_response, http_exception_handler, validation_exception_handler
from app.routers import analytics
from app.routers import auth
from app.routers import pages
from app.routers import visibility
from persistence.db import init_db

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
)
for _handler in logging.getLogger().handlers:
    _handler.addFilter(RequestIdLogFilter())
logger = logging.getLogger(__name__)

# Load and validate configuration at startup
_config = load_config()
log_config_snapshot(_config)

# Export config value for middleware (validated)
MAX_REQUEST_SIZE_BYTES = _config.max_request_size_bytes


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests exceeding size limit to prevent payload bombs."""

    async def dispatch(self, request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length:
            try:
                size = int(content_length)
            except ValueError:
                return error_response(request, 400, "bad_request", "Invalid Content-Length header")
            if size > MAX_REQUEST_SIZE_BYTES:
                return error_response(request, 413, "payload_too_large", "Request entity too large")
        return await call_next(request)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        # Responses depend on who is viewing
        response.headers["Cache-Control"] = "no-store"
        return response


# Capture service start time for uptime reporting
_SERVICE_START_TIME = datetime.now(timezone.utc)

app = FastAPI(
    title="Picks API",
    description="CMS pages with per-viewer block visibility",
    version=_config.service_version,
)
app.state.config = _config

app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)

# Middleware stack (the last one added runs first)
# 1. CORS: outermost
# 2. CorrelationId: sets the request id before anything can reject the request
# 3. SecurityHeaders: Adds security headers to responses
# 4. RequestSizeLimit: Rejects oversized requests early
app.add_middleware(RequestSizeLimitMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(CorrelationIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router)
app.include_router(pages.router)
app.include_router(visibility.router)
app.include_router(analytics.router)


@app.on_event("startup")
async def startup_event():
    """Initialize database tables."""
    init_db()
    logger.info("Database initialized")


@app.get("/health")
async def health(request: Request):
    """Health check with service observability."""
    return {
        "request_id": get_request_id(request),
        "status": "healthy",
        "service": _config.service_name,
        "version": _config.service_version,
        "environment": _config.environment,
        "profile_provider": _config.profile_provider,
        "started_at": _SERVICE_START_TIME.isoformat(),
    }
