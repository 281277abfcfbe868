# persistence/activity.py
"""
Viewer activity storage.

The facts a visibility profile is built from:
- token balance (user_tokens)
- analyzer runs (analyzer_requests; only completed runs count)
- contest entries (contest_entries)

Balances are written as plain values here. How tokens are earned or spent
is owned elsewhere.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional
from uuid import uuid4

from persistence.db import get_db, init_db

_logger = logging.getLogger(__name__)

STATUS_PENDING = "pending"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"

ANALYZER_STATUSES = (STATUS_PENDING, STATUS_COMPLETED, STATUS_FAILED)


# =============================================================================
# Token balance
# =============================================================================


def get_token_balance(user_id: str) -> int:
    """Get a user's token balance. Users without a row have 0 tokens."""
    init_db()

    with get_db() as conn:
        row = conn.execute(
            "SELECT balance FROM user_tokens WHERE user_id = ?",
            (user_id,),
        ).fetchone()

    if row is None or row["balance"] is None:
        return 0
    return int(row["balance"])


def set_token_balance(user_id: str, balance: int) -> None:
    """
    Store a user's token balance.

    Raises:
        ValueError: If balance is negative
    """
    if balance < 0:
        raise ValueError(f"Token balance cannot be negative: {balance}")

    init_db()

    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO user_tokens (user_id, balance, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                balance = excluded.balance,
                updated_at = excluded.updated_at
            """,
            (user_id, int(balance), datetime.utcnow().isoformat()),
        )

    _logger.debug(f"Set token balance for {user_id} to {balance}")


# =============================================================================
# Analyzer requests
# =============================================================================


def record_analyzer_request(
    user_id: str,
    model_id: str,
    status: str = STATUS_PENDING,
) -> str:
    """
    Record an analyzer run for a user.

    Args:
        user_id: User who ran the analyzer
        model_id: Analyzer model id (e.g. "nfl-v1")
        status: pending, completed or failed

    Returns:
        Request ID
    """
    if status not in ANALYZER_STATUSES:
        raise ValueError(f"Invalid analyzer request status: {status}")

    init_db()

    request_id = str(uuid4())
    now = datetime.utcnow().isoformat()

    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO analyzer_requests (id, user_id, model_id, status, created_at, completed_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                request_id,
                user_id,
                model_id,
                status,
                now,
                now if status == STATUS_COMPLETED else None,
            ),
        )

    return request_id


def complete_analyzer_request(request_id: str) -> bool:
    """
    Mark an analyzer request completed.

    Returns:
        True if updated, False if not found
    """
    init_db()

    with get_db() as conn:
        cursor = conn.execute(
            """
            UPDATE analyzer_requests SET status = ?, completed_at = ?
            WHERE id = ?
            """,
            (STATUS_COMPLETED, datetime.utcnow().isoformat(), request_id),
        )
        return cursor.rowcount > 0


def get_completed_analyzer_ids(user_id: str) -> set[str]:
    """Get the model ids a user has at least one completed request against."""
    init_db()

    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT DISTINCT model_id FROM analyzer_requests
            WHERE user_id = ? AND status = ?
            """,
            (user_id, STATUS_COMPLETED),
        ).fetchall()

    return {row["model_id"] for row in rows}


# =============================================================================
# Contest entries
# =============================================================================


def record_contest_entry(user_id: str, contest_id: str) -> Optional[str]:
    """
    Record that a user entered a contest.

    Returns:
        Entry ID, or None if the user already entered this contest
    """
    init_db()

    entry_id = str(uuid4())

    with get_db() as conn:
        cursor = conn.execute(
            """
            INSERT OR IGNORE INTO contest_entries (id, user_id, contest_id, created_at)
            VALUES (?, ?, ?, ?)
            """,
            (entry_id, user_id, contest_id, datetime.utcnow().isoformat()),
        )
        if cursor.rowcount == 0:
            return None

    return entry_id


def get_joined_contest_ids(user_id: str) -> set[str]:
    """Get the contest ids a user has an entry in."""
    init_db()

    with get_db() as conn:
        rows = conn.execute(
            "SELECT contest_id FROM contest_entries WHERE user_id = ?",
            (user_id,),
        ).fetchall()

    return {row["contest_id"] for row in rows}
