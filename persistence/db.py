# persistence/db.py
"""
SQLite database connection and schema management.

One file-based SQLite database holds accounts, viewer activity (tokens,
analyzer runs, contest entries), CMS pages and blocks, and analytics.
The path comes from PICKS_DB_PATH.
"""

from __future__ import annotations

import logging
import os
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path

_logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path(__file__).parent.parent / "data" / "picks.db"
DB_PATH = Path(os.environ.get("PICKS_DB_PATH", str(DEFAULT_DB_PATH)))

# One connection per thread
_local = threading.local()
_init_lock = threading.Lock()
_initialized = False

_SCHEMA = (
    # Accounts
    """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        email TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS sessions (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        created_at TEXT NOT NULL,
        expires_at TEXT NOT NULL,
        ip_address TEXT,
        user_agent TEXT,
        FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_sessions_user ON sessions(user_id)",
    # Viewer activity read by the visibility profile
    """
    CREATE TABLE IF NOT EXISTS user_tokens (
        user_id TEXT PRIMARY KEY,
        balance INTEGER NOT NULL DEFAULT 0,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS analyzer_requests (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        model_id TEXT NOT NULL,
        status TEXT NOT NULL,
        created_at TEXT NOT NULL,
        completed_at TEXT
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_analyzer_requests_user
    ON analyzer_requests(user_id, status)
    """,
    """
    CREATE TABLE IF NOT EXISTS contest_entries (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        contest_id TEXT NOT NULL,
        created_at TEXT NOT NULL,
        UNIQUE (user_id, contest_id)
    )
    """,
    # CMS pages and blocks
    """
    CREATE TABLE IF NOT EXISTS page_layouts (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        slug TEXT NOT NULL UNIQUE,
        description TEXT,
        is_published INTEGER NOT NULL DEFAULT 0,
        metadata_json TEXT,
        visibility_rules_json TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS ui_blocks (
        id TEXT PRIMARY KEY,
        page_id TEXT NOT NULL,
        title TEXT NOT NULL,
        description TEXT,
        block_type TEXT NOT NULL,
        content_json TEXT,
        position INTEGER NOT NULL DEFAULT 0,
        background_color TEXT,
        visibility_rules_json TEXT,
        animation TEXT,
        layout_mode TEXT,
        created_at TEXT NOT NULL,
        FOREIGN KEY (page_id) REFERENCES page_layouts(id) ON DELETE CASCADE
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_ui_blocks_page ON ui_blocks(page_id, position)",
    # Analytics
    """
    CREATE TABLE IF NOT EXISTS page_views (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        page_id TEXT NOT NULL,
        user_id TEXT,
        device_type TEXT NOT NULL,
        viewed_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_page_views_page ON page_views(page_id, viewed_at DESC)",
    """
    CREATE TABLE IF NOT EXISTS block_interactions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        block_id TEXT NOT NULL,
        user_id TEXT,
        interaction_type TEXT NOT NULL,
        tokens_spent INTEGER NOT NULL DEFAULT 0,
        recorded_at TEXT NOT NULL
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_block_interactions_block
    ON block_interactions(block_id, recorded_at DESC)
    """,
)

# Drop order respects foreign keys
_TABLES = (
    "block_interactions",
    "page_views",
    "ui_blocks",
    "page_layouts",
    "contest_entries",
    "analyzer_requests",
    "user_tokens",
    "sessions",
    "users",
)


def _get_connection() -> sqlite3.Connection:
    """Get thread-local database connection."""
    if getattr(_local, "connection", None) is None:
        DB_PATH.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(
            str(DB_PATH),
            timeout=30.0,
            check_same_thread=False,
        )
        conn.execute("PRAGMA foreign_keys = ON")
        conn.row_factory = sqlite3.Row
        _local.connection = conn

    return _local.connection


@contextmanager
def get_db():
    """
    Get database connection context manager.

    Commits on success, rolls back and re-raises on error.

    Usage:
        with get_db() as conn:
            cursor = conn.execute("SELECT ...")
    """
    conn = _get_connection()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise


def init_db() -> None:
    """
    Initialize database schema.

    Creates tables if they don't exist. Safe to call multiple times.
    """
    global _initialized

    with _init_lock:
        if _initialized:
            return

        with get_db() as conn:
            for statement in _SCHEMA:
                conn.execute(statement)

        _logger.info(f"Database initialized at {DB_PATH}")
        _initialized = True


def close_db() -> None:
    """Close thread-local database connection."""
    if getattr(_local, "connection", None) is not None:
        _local.connection.close()
        _local.connection = None


def reset_db() -> None:
    """Reset database (for testing). Drops all tables."""
    global _initialized

    with _init_lock:
        with get_db() as conn:
            for table in _TABLES:
                conn.execute(f"DROP TABLE IF EXISTS {table}")
        _initialized = False


def get_db_path() -> Path:
    """Get the database file path."""
    return DB_PATH
