# app/correlation.py
"""
Request correlation for tracing and logging.

Provides:
- X-Request-Id handling (accepts a safe client-provided id or generates UUID4)
- request.state.request_id for route handlers
- A context variable plus logging filter so every log line written while
  serving a request carries its id
"""
from __future__ import annotations

import logging
import re
import uuid
from contextvars import ContextVar
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-Id"
MAX_REQUEST_ID_LENGTH = 64
# Alphanumeric, hyphens and underscores only (safe for logging)
SAFE_REQUEST_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")

# Placeholder used in log lines written outside a request
NO_REQUEST_ID = "-"

_current_request_id: ContextVar[str] = ContextVar("request_id", default=NO_REQUEST_ID)


def validate_request_id(request_id: Optional[str]) -> Optional[str]:
    """Return the client-provided id if it is safe to echo and log, else None."""
    if not request_id or len(request_id) > MAX_REQUEST_ID_LENGTH:
        return None
    if not SAFE_REQUEST_ID_PATTERN.match(request_id):
        return None
    return request_id


def generate_request_id() -> str:
    return str(uuid.uuid4())


def get_request_id(request: Request) -> Optional[str]:
    """Get request ID from request state (if set by middleware)."""
    return getattr(request.state, "request_id", None)


def current_request_id() -> str:
    """Request id of the request being served, or "-" outside one."""
    return _current_request_id.get()


class RequestIdLogFilter(logging.Filter):
    """Stamp record.request_id on every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = current_request_id()
        return True


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    Attach a request id to every request and response.

    - Reads X-Request-Id (validated) or generates one
    - Stores it in request.state and the logging context
    - Echoes it in the X-Request-Id response header
    """

    async def dispatch(self, request: Request, call_next):
        request_id = validate_request_id(request.headers.get("x-request-id")) or generate_request_id()
        request.state.request_id = request_id

        token = _current_request_id.set(request_id)
        try:
            response = await call_next(request)
        finally:
            _current_request_id.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
