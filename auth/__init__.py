# auth/__init__.py
"""
Authentication module.

Provides:
- Accounts with email/password login
- Sessions carried in an HTTP-only cookie
- Password hashing with bcrypt

The signed-in state feeds the visibility profile's is_authenticated flag.
"""

from auth.models import User, Session
from auth.service import (
    AuthError,
    InvalidCredentialsError,
    UserExistsError,
    WeakPasswordError,
    create_user,
    authenticate_user,
    create_session,
    get_session,
    invalidate_session,
    get_current_user,
)

__all__ = [
    "User",
    "Session",
    "AuthError",
    "InvalidCredentialsError",
    "UserExistsError",
    "WeakPasswordError",
    "create_user",
    "authenticate_user",
    "create_session",
    "get_session",
    "invalidate_session",
    "get_current_user",
]
