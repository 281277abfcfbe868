# auth/service.py
"""
Authentication service.

Handles:
- Account registration and lookup
- Credential checks
- Session creation, lookup and invalidation
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from auth.models import Session, User, normalize_email
from auth.password import hash_password, password_problem, verify_password
from persistence.db import get_db, init_db

_logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Base authentication error."""
    pass


class UserExistsError(AuthError):
    """An account with this email already exists."""
    pass


class WeakPasswordError(AuthError):
    """Password doesn't meet the policy."""
    pass


class InvalidCredentialsError(AuthError):
    """Unknown email or wrong password."""
    pass


# =============================================================================
# Accounts
# =============================================================================


def create_user(email: str, password: str) -> User:
    """
    Register a new account.

    Raises:
        WeakPasswordError: If the password fails the policy
        UserExistsError: If the email is already registered
    """
    init_db()

    problem = password_problem(password)
    if problem:
        raise WeakPasswordError(problem)

    email = normalize_email(email)
    if get_user_by_email(email):
        raise UserExistsError(f"User with email {email} already exists")

    user = User.new(email=email, password_hash=hash_password(password))

    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO users (id, email, password_hash, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                user.id,
                user.email,
                user.password_hash,
                user.created_at.isoformat(),
                user.updated_at.isoformat(),
            ),
        )

    _logger.info(f"Created user {user.id}")
    return user


def get_user_by_email(email: str) -> Optional[User]:
    """Look up an account by email."""
    init_db()

    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM users WHERE email = ?",
            (normalize_email(email),),
        ).fetchone()

    return _row_to_user(row) if row else None


def get_user_by_id(user_id: str) -> Optional[User]:
    """Look up an account by ID."""
    init_db()

    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM users WHERE id = ?",
            (user_id,),
        ).fetchone()

    return _row_to_user(row) if row else None


def _row_to_user(row) -> User:
    return User(
        id=row["id"],
        email=row["email"],
        password_hash=row["password_hash"],
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


def authenticate_user(email: str, password: str) -> User:
    """
    Check an email/password pair.

    Raises:
        InvalidCredentialsError: Unknown email or wrong password (same
            message for both)
    """
    user = get_user_by_email(email)

    if user is None or not verify_password(password, user.password_hash):
        _logger.warning("Failed login attempt")
        raise InvalidCredentialsError("Invalid email or password")

    _logger.info(f"User authenticated: {user.id}")
    return user


# =============================================================================
# Sessions
# =============================================================================


def create_session(
    user_id: str,
    duration_days: int = 7,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> Session:
    """Start a session for a user."""
    init_db()

    session = Session.new(
        user_id=user_id,
        duration_days=duration_days,
        ip_address=ip_address,
        user_agent=user_agent,
    )

    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO sessions (id, user_id, created_at, expires_at, ip_address, user_agent)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                session.id,
                session.user_id,
                session.created_at.isoformat(),
                session.expires_at.isoformat(),
                session.ip_address,
                session.user_agent,
            ),
        )

    _logger.debug(f"Created session for user {user_id}")
    return session


def get_session(session_id: str) -> Optional[Session]:
    """
    Get a live session.

    Expired sessions are deleted and reported as missing.
    """
    init_db()

    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM sessions WHERE id = ?",
            (session_id,),
        ).fetchone()

    if row is None:
        return None

    session = Session(
        id=row["id"],
        user_id=row["user_id"],
        created_at=datetime.fromisoformat(row["created_at"]),
        expires_at=datetime.fromisoformat(row["expires_at"]),
        ip_address=row["ip_address"],
        user_agent=row["user_agent"],
    )

    if not session.is_valid:
        invalidate_session(session_id)
        return None

    return session


def invalidate_session(session_id: str) -> bool:
    """Delete a session. Returns False if it did not exist."""
    init_db()

    with get_db() as conn:
        cursor = conn.execute(
            "DELETE FROM sessions WHERE id = ?",
            (session_id,),
        )
        return cursor.rowcount > 0


def get_current_user(session_id: Optional[str]) -> Optional[User]:
    """
    Resolve the signed-in user from a session ID.

    Returns None for a missing, unknown or expired session.
    """
    if not session_id:
        return None

    session = get_session(session_id)
    if session is None:
        return None

    return get_user_by_id(session.user_id)
