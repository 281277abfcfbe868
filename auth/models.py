# auth/models.py
"""
Account and session models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional
import uuid


@dataclass
class User:
    """
    Viewer account.

    Attributes:
        id: Unique user ID (UUID)
        email: Login email (unique, stored lowercase)
        password_hash: Bcrypt hash
        created_at: Account creation timestamp
        updated_at: Last update timestamp
    """
    id: str
    email: str
    password_hash: str
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    @classmethod
    def new(cls, email: str, password_hash: str) -> User:
        """Create a new user with a generated ID."""
        now = datetime.utcnow()
        return cls(
            id=str(uuid.uuid4()),
            email=normalize_email(email),
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
        )

    def to_dict(self) -> dict:
        """Public fields only; the password hash never leaves the service."""
        return {
            "id": self.id,
            "email": self.email,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class Session:
    """
    Signed-in session, referenced by the session cookie.

    Attributes:
        id: Session ID (cookie value)
        user_id: Owner
        created_at: Creation timestamp
        expires_at: Expiry timestamp
        ip_address: Client IP (audit only)
        user_agent: Client user agent (audit only)
    """
    id: str
    user_id: str
    created_at: datetime = field(default_factory=datetime.utcnow)
    expires_at: datetime = field(default_factory=lambda: datetime.utcnow() + timedelta(days=7))
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    @classmethod
    def new(
        cls,
        user_id: str,
        duration_days: int = 7,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Session:
        """Create a new session with a generated ID."""
        now = datetime.utcnow()
        return cls(
            id=str(uuid.uuid4()),
            user_id=user_id,
            created_at=now,
            expires_at=now + timedelta(days=duration_days),
            ip_address=ip_address,
            user_agent=user_agent,
        )

    @property
    def is_valid(self) -> bool:
        """Check if session has not expired."""
        return datetime.utcnow() < self.expires_at


def normalize_email(email: str) -> str:
    return email.strip().lower()
