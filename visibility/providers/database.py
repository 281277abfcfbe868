# visibility/providers/database.py
"""
Database Profile Provider

Builds profiles from the local SQLite store:
- user_tokens.balance (no row => 0 tokens)
- analyzer_requests.model_id for completed requests
- contest_entries.contest_id
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Optional

from persistence.activity import (
    get_completed_analyzer_ids,
    get_joined_contest_ids,
    get_token_balance,
)
from visibility.profile import VisibilityProfile, member_profile
from visibility.providers.base import ProfileProvider

_logger = logging.getLogger(__name__)


class DatabaseProfileProvider(ProfileProvider):
    """Profile provider backed by the application database."""

    @property
    def source_name(self) -> str:
        return "database"

    def fetch(self, user_id: str) -> Optional[VisibilityProfile]:
        try:
            balance = get_token_balance(user_id)
            analyzer_ids = get_completed_analyzer_ids(user_id)
            contest_ids = get_joined_contest_ids(user_id)
        except sqlite3.Error as e:
            _logger.warning(f"Profile query failed for user {user_id}: {e}")
            return None

        return member_profile(
            user_id=user_id,
            token_balance=balance,
            used_analyzer_ids=analyzer_ids,
            joined_contest_ids=contest_ids,
            source=self.source_name,
        )
