# auth/tests/test_auth.py
"""
Tests for authentication module.

Tests:
- User and Session models
- Password hashing and policy
- User service (register, lookup, authenticate)
- Session service (create, validate, invalidate)
"""

from __future__ import annotations

import pytest
from datetime import datetime, timedelta


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_database():
    """Reset database before each test."""
    from persistence.db import reset_db, init_db

    reset_db()
    init_db()
    yield
    reset_db()


@pytest.fixture(autouse=True)
def fast_hashing(monkeypatch):
    """Minimum bcrypt cost keeps the suite fast."""
    monkeypatch.setattr("auth.password.BCRYPT_ROUNDS", 4)


# =============================================================================
# Model Tests
# =============================================================================


class TestUserModel:
    """Tests for User model."""

    def test_user_new_generates_id(self):
        """User.new() generates a unique ID."""
        from auth.models import User

        user = User.new(email="test@example.com", password_hash="hash123")
        assert user.id is not None
        assert len(user.id) == 36  # UUID format

    def test_user_new_normalizes_email(self):
        """User.new() normalizes email to lowercase."""
        from auth.models import User

        user = User.new(email="  TEST@Example.COM  ", password_hash="hash")
        assert user.email == "test@example.com"

    def test_user_to_dict_excludes_password(self):
        """to_dict() never exposes the password hash."""
        from auth.models import User

        user = User.new(email="test@example.com", password_hash="secret_hash")
        data = user.to_dict()
        assert "password_hash" not in data
        assert data["email"] == "test@example.com"
        assert set(data) == {"id", "email", "created_at"}


class TestSessionModel:
    """Tests for Session model."""

    def test_session_new_generates_id(self):
        from auth.models import Session

        session = Session.new(user_id="user-1")
        assert len(session.id) == 36
        assert session.user_id == "user-1"

    def test_session_new_sets_expiry(self):
        """Default session lasts 7 days."""
        from auth.models import Session

        session = Session.new(user_id="user-1")
        delta = session.expires_at - session.created_at
        assert delta == timedelta(days=7)

    def test_session_new_custom_duration(self):
        from auth.models import Session

        session = Session.new(user_id="user-1", duration_days=1)
        assert session.expires_at - session.created_at == timedelta(days=1)

    def test_session_is_valid_true_for_new(self):
        from auth.models import Session

        assert Session.new(user_id="user-1").is_valid is True

    def test_session_is_valid_false_for_expired(self):
        from auth.models import Session

        session = Session(
            id="s1",
            user_id="user-1",
            created_at=datetime.utcnow() - timedelta(days=8),
            expires_at=datetime.utcnow() - timedelta(days=1),
        )
        assert session.is_valid is False


# =============================================================================
# Password Tests
# =============================================================================


class TestPasswordHashing:
    """Tests for password hashing."""

    def test_hash_password_creates_hash(self):
        from auth.password import hash_password

        hashed = hash_password("Password123")
        assert hashed != "Password123"
        assert hashed.startswith("$2")

    def test_hash_password_different_hashes(self):
        """Same password hashes differently each time (salt)."""
        from auth.password import hash_password

        assert hash_password("Password123") != hash_password("Password123")

    def test_hash_password_empty_raises(self):
        from auth.password import hash_password

        with pytest.raises(ValueError):
            hash_password("")

    def test_verify_password_correct(self):
        from auth.password import hash_password, verify_password

        assert verify_password("Password123", hash_password("Password123")) is True

    def test_verify_password_incorrect(self):
        from auth.password import hash_password, verify_password

        assert verify_password("Wrong123", hash_password("Password123")) is False

    def test_verify_password_empty_returns_false(self):
        from auth.password import verify_password

        assert verify_password("", "somehash") is False

    def test_verify_password_malformed_hash(self):
        """A corrupt stored hash never matches."""
        from auth.password import verify_password

        assert verify_password("Password123", "not-a-bcrypt-hash") is False

    @pytest.mark.parametrize(
        "password,expected",
        [
            ("Password123", None),
            ("", "Password cannot be empty"),
            ("Pass1", "at least 8"),
            ("12345678", "letter"),
            ("Password", "digit"),
        ],
    )
    def test_password_problem(self, password, expected):
        from auth.password import password_problem

        problem = password_problem(password)
        if expected is None:
            assert problem is None
        else:
            assert expected in problem


# =============================================================================
# Service Tests
# =============================================================================


class TestUserService:
    """Tests for user service functions."""

    def test_create_user_success(self):
        from auth.service import create_user

        user = create_user("test@example.com", "Password123")
        assert user.id is not None
        assert user.email == "test@example.com"
        assert user.password_hash != "Password123"

    def test_create_user_duplicate_raises(self):
        """Emails are unique regardless of case."""
        from auth.service import UserExistsError, create_user

        create_user("test@example.com", "Password123")
        with pytest.raises(UserExistsError):
            create_user("TEST@example.com", "Password456")

    def test_create_user_weak_password_raises(self):
        from auth.service import WeakPasswordError, create_user

        with pytest.raises(WeakPasswordError):
            create_user("test@example.com", "weak")

    def test_get_user_by_email_found(self):
        from auth.service import create_user, get_user_by_email

        created = create_user("test@example.com", "Password123")
        found = get_user_by_email("Test@Example.com")
        assert found is not None
        assert found.id == created.id

    def test_get_user_by_email_not_found(self):
        from auth.service import get_user_by_email

        assert get_user_by_email("nobody@example.com") is None

    def test_get_user_by_id(self):
        from auth.service import create_user, get_user_by_id

        created = create_user("test@example.com", "Password123")
        assert get_user_by_id(created.id).email == "test@example.com"
        assert get_user_by_id("missing") is None

    def test_authenticate_user_success(self):
        from auth.service import authenticate_user, create_user

        created = create_user("test@example.com", "Password123")
        assert authenticate_user("test@example.com", "Password123").id == created.id

    def test_authenticate_user_wrong_password(self):
        from auth.service import InvalidCredentialsError, authenticate_user, create_user

        create_user("test@example.com", "Password123")
        with pytest.raises(InvalidCredentialsError):
            authenticate_user("test@example.com", "WrongPassword1")

    def test_authenticate_user_nonexistent(self):
        """Unknown email gets the same error as a wrong password."""
        from auth.service import InvalidCredentialsError, authenticate_user

        with pytest.raises(InvalidCredentialsError) as exc_info:
            authenticate_user("nobody@example.com", "Password123")
        assert str(exc_info.value) == "Invalid email or password"


class TestSessionService:
    """Tests for session service functions."""

    def _user(self):
        from auth.service import create_user

        return create_user("test@example.com", "Password123")

    def test_create_session_success(self):
        from auth.service import create_session

        user = self._user()
        session = create_session(user.id)
        assert session.user_id == user.id
        assert session.is_valid is True

    def test_create_session_with_metadata(self):
        from auth.service import create_session, get_session

        user = self._user()
        session = create_session(user.id, ip_address="203.0.113.7", user_agent="pytest")
        loaded = get_session(session.id)
        assert loaded.ip_address == "203.0.113.7"
        assert loaded.user_agent == "pytest"

    def test_get_session_not_found(self):
        from auth.service import get_session

        assert get_session("nonexistent") is None

    def test_expired_session_deleted(self):
        """An expired session reads as missing and is removed."""
        from auth.service import get_session
        from persistence.db import get_db

        user = self._user()
        past = datetime.utcnow() - timedelta(days=1)
        with get_db() as conn:
            conn.execute(
                "INSERT INTO sessions (id, user_id, created_at, expires_at) VALUES (?, ?, ?, ?)",
                ("old", user.id, (past - timedelta(days=7)).isoformat(), past.isoformat()),
            )

        assert get_session("old") is None
        with get_db() as conn:
            row = conn.execute("SELECT id FROM sessions WHERE id = ?", ("old",)).fetchone()
        assert row is None

    def test_invalidate_session(self):
        from auth.service import create_session, get_session, invalidate_session

        session = create_session(self._user().id)
        assert invalidate_session(session.id) is True
        assert get_session(session.id) is None
        assert invalidate_session(session.id) is False

    def test_get_current_user(self):
        from auth.service import create_session, get_current_user

        user = self._user()
        session = create_session(user.id)
        assert get_current_user(session.id).id == user.id
        assert get_current_user(None) is None
        assert get_current_user("bogus") is None


# =============================================================================
# Integration Tests
# =============================================================================


class TestAuthIntegration:
    """Integration tests for full auth flow."""

    def test_full_auth_flow(self):
        """Test complete signup -> login -> logout flow."""
        from auth.service import (
            authenticate_user,
            create_session,
            create_user,
            get_current_user,
            get_session,
            invalidate_session,
        )

        # 1. Signup
        user = create_user("newuser@example.com", "Password123")

        # 2. Login
        auth_user = authenticate_user("newuser@example.com", "Password123")
        assert auth_user.id == user.id

        # 3. Create session
        session = create_session(auth_user.id)

        # 4. Get current user from session
        current = get_current_user(session.id)
        assert current.email == "newuser@example.com"

        # 5. Logout (invalidate session)
        invalidate_session(session.id)
        assert get_session(session.id) is None

        # 6. Current user is None after logout
        assert get_current_user(session.id) is None
