# persistence/analytics.py
"""
Page analytics storage.

Records:
- Page views (with the viewer's device type)
- Block interactions (views, clicks, token spends inside a block)
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional

from persistence.db import get_db, init_db

_logger = logging.getLogger(__name__)

# Default reporting window
DEFAULT_WINDOW_HOURS = 24


def record_page_view(
    page_id: str,
    device_type: str,
    user_id: Optional[str] = None,
) -> None:
    """
    Record a page view.

    Args:
        page_id: Viewed page
        device_type: "mobile" or "desktop"
        user_id: Viewer, None for anonymous views
    """
    init_db()

    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO page_views (page_id, user_id, device_type, viewed_at)
            VALUES (?, ?, ?, ?)
            """,
            (page_id, user_id, device_type, datetime.utcnow().isoformat()),
        )


def record_block_interaction(
    block_id: str,
    interaction_type: str,
    tokens_spent: int = 0,
    user_id: Optional[str] = None,
) -> None:
    """
    Record an interaction with a block.

    Raises:
        ValueError: If tokens_spent is negative
    """
    if tokens_spent < 0:
        raise ValueError(f"tokens_spent cannot be negative: {tokens_spent}")

    init_db()

    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO block_interactions
            (block_id, user_id, interaction_type, tokens_spent, recorded_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (block_id, user_id, interaction_type, tokens_spent, datetime.utcnow().isoformat()),
        )


def get_page_view_count(
    page_id: str,
    since: Optional[datetime] = None,
    device_type: Optional[str] = None,
) -> int:
    """
    Count views of a page.

    Args:
        page_id: Page to count
        since: Only count after this time (default: last 24 hours)
        device_type: Optional device filter
    """
    init_db()

    if since is None:
        since = datetime.utcnow() - timedelta(hours=DEFAULT_WINDOW_HOURS)

    query = "SELECT COUNT(*) AS count FROM page_views WHERE page_id = ? AND viewed_at > ?"
    params: list = [page_id, since.isoformat()]
    if device_type:
        query += " AND device_type = ?"
        params.append(device_type)

    with get_db() as conn:
        row = conn.execute(query, params).fetchone()

    return row["count"] if row else 0


def get_block_interaction_summary(
    block_id: str,
    since: Optional[datetime] = None,
) -> dict:
    """
    Summarize interactions with a block.

    Returns:
        Dict with per-type counts and total tokens spent
    """
    init_db()

    if since is None:
        since = datetime.utcnow() - timedelta(hours=DEFAULT_WINDOW_HOURS)

    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT interaction_type, COUNT(*) AS count, SUM(tokens_spent) AS tokens
            FROM block_interactions
            WHERE block_id = ? AND recorded_at > ?
            GROUP BY interaction_type
            """,
            (block_id, since.isoformat()),
        ).fetchall()

    counts = {row["interaction_type"]: row["count"] for row in rows}
    tokens_spent = sum(row["tokens"] or 0 for row in rows)

    return {
        "block_id": block_id,
        "interactions": counts,
        "total_interactions": sum(counts.values()),
        "tokens_spent": tokens_spent,
    }
