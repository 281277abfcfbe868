# auth/middleware.py
"""
FastAPI session handling.

Provides:
- Session cookie helpers
- Dependencies resolving the signed-in user (optional or required)
"""

from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, Request, Response

from auth.models import User
from auth.service import get_current_user

SESSION_COOKIE_NAME = "picks_session"


def get_session_id(request: Request) -> Optional[str]:
    """Extract session ID from request cookies."""
    return request.cookies.get(SESSION_COOKIE_NAME)


def set_session_cookie(
    response: Response,
    session_id: str,
    max_age_days: int = 7,
    secure: bool = False,
) -> None:
    """Set the HTTP-only session cookie (secure=True outside development)."""
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=session_id,
        max_age=max_age_days * 24 * 60 * 60,
        httponly=True,
        samesite="lax",
        secure=secure,
    )


def clear_session_cookie(response: Response) -> None:
    """Remove the session cookie."""
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        httponly=True,
        samesite="lax",
    )


async def get_optional_user(request: Request) -> Optional[User]:
    """
    FastAPI dependency: the signed-in user, or None for anonymous viewers.
    """
    return get_current_user(get_session_id(request))


async def get_required_user(request: Request) -> User:
    """
    FastAPI dependency: the signed-in user.

    Raises 401 for anonymous viewers.
    """
    user = await get_optional_user(request)
    if user is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return user
