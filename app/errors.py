# app/errors.py
"""
JSON error bodies for the HTTP API.

Every error response has the shape {request_id, error, detail} so clients
can quote the request id when reporting a problem.
"""
from __future__ import annotations

from typing import Any, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.correlation import get_request_id

# Non-standard status used when the client went away mid-request
CLIENT_CLOSED_REQUEST = 499

_ERROR_CODES = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    409: "conflict",
    413: "payload_too_large",
    422: "validation_error",
}


def error_response(
    request: Request,
    status_code: int,
    error: str,
    detail: Any,
    **extra: Any,
) -> JSONResponse:
    """Build an error response carrying the request id."""
    content = {
        "request_id": get_request_id(request),
        "error": error,
        "detail": detail,
    }
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


def _code_for(status_code: int) -> str:
    return _ERROR_CODES.get(status_code, "error")


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail: Optional[Any] = exc.detail
    return error_response(request, exc.status_code, _code_for(exc.status_code), detail)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Pydantic error contexts can hold exception objects; keep only the readable parts
    errors = [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg", ""), "type": e.get("type", "")}
        for e in exc.errors()
    ]
    return error_response(request, 422, _code_for(422), errors)
