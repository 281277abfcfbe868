# app/routers/auth.py
"""
Authentication API endpoints.

Sessions are carried in an HTTP-only cookie. Signing in or out changes
the viewer's is_authenticated fact, so logout also drops the cached
visibility profile.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response, status

from app.correlation import get_request_id
from app.errors import error_response
from app.schemas.visibility import AuthResponse, LoginRequest, SignupRequest, UserSchema
from auth.middleware import (
    clear_session_cookie,
    get_required_user,
    get_session_id,
    set_session_cookie,
)
from auth.models import User
from auth.service import (
    InvalidCredentialsError,
    UserExistsError,
    WeakPasswordError,
    authenticate_user,
    create_session,
    get_session,
    invalidate_session,
    create_user,
)
from visibility.service import get_profile_service

_logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _start_session(request: Request, response: Response, user: User) -> None:
    config = request.app.state.config
    session = create_session(
        user.id,
        duration_days=config.session_duration_days,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    set_session_cookie(
        response,
        session.id,
        max_age_days=config.session_duration_days,
        secure=config.session_cookie_secure,
    )


def _auth_response(request: Request, user: User) -> AuthResponse:
    return AuthResponse(request_id=get_request_id(request), user=UserSchema(**user.to_dict()))


# =============================================================================
# Routes
# =============================================================================


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(body: SignupRequest, request: Request, response: Response):
    """Register a new account and sign it in."""
    try:
        user = create_user(body.email, body.password)
    except WeakPasswordError as exc:
        return error_response(request, 400, "weak_password", str(exc))
    except UserExistsError:
        return error_response(request, 409, "user_exists", "An account with this email already exists")

    _start_session(request, response, user)
    return _auth_response(request, user)


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, request: Request, response: Response):
    """Sign in with email/password."""
    try:
        user = authenticate_user(body.email, body.password)
    except InvalidCredentialsError as exc:
        return error_response(request, 401, "invalid_credentials", str(exc))

    _start_session(request, response, user)
    return _auth_response(request, user)


@router.post("/logout")
async def logout(request: Request, response: Response):
    """End the current session. Safe to call when already signed out."""
    session_id = get_session_id(request)
    if session_id:
        session = get_session(session_id)
        invalidate_session(session_id)
        if session is not None:
            get_profile_service().invalidate(session.user_id)
            _logger.info(f"User {session.user_id} logged out")

    clear_session_cookie(response)
    return {"request_id": get_request_id(request), "success": True}


@router.get("/me", response_model=AuthResponse)
async def me(request: Request, user: User = Depends(get_required_user)):
    """Get the signed-in account."""
    return _auth_response(request, user)
