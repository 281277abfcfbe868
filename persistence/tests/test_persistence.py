# persistence/tests/test_persistence.py
"""Tests for persistence layer."""

import pytest
from datetime import datetime, timedelta

from persistence.db import init_db, get_db, reset_db, get_db_path
from persistence.activity import (
    STATUS_COMPLETED,
    STATUS_FAILED,
    complete_analyzer_request,
    get_completed_analyzer_ids,
    get_joined_contest_ids,
    get_token_balance,
    record_analyzer_request,
    record_contest_entry,
    set_token_balance,
)
from persistence.analytics import (
    get_block_interaction_summary,
    get_page_view_count,
    record_block_interaction,
    record_page_view,
)


@pytest.fixture(autouse=True)
def reset_database():
    """Reset database before and after each test."""
    reset_db()
    init_db()
    yield
    reset_db()


class TestDatabaseInit:
    """Test database initialization."""

    def test_init_creates_tables(self):
        init_db()
        with get_db() as conn:
            tables = conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table'"
            ).fetchall()
            table_names = [t["name"] for t in tables]

        for table in (
            "users",
            "sessions",
            "user_tokens",
            "analyzer_requests",
            "contest_entries",
            "page_layouts",
            "ui_blocks",
            "page_views",
            "block_interactions",
        ):
            assert table in table_names

    def test_init_is_idempotent(self):
        init_db()
        init_db()  # Should not raise

    def test_db_path_from_environment(self):
        """conftest points the database at a temporary file."""
        assert get_db_path().name == "picks-test.db"

    def test_get_db_rolls_back_on_error(self):
        with pytest.raises(RuntimeError):
            with get_db() as conn:
                conn.execute(
                    "INSERT INTO user_tokens (user_id, balance, updated_at) VALUES (?, ?, ?)",
                    ("u1", 10, datetime.utcnow().isoformat()),
                )
                raise RuntimeError("boom")

        assert get_token_balance("u1") == 0

    def test_reset_drops_tables(self):
        set_token_balance("u1", 5)
        reset_db()
        init_db()
        assert get_token_balance("u1") == 0


class TestTokenBalance:
    """Test token balance storage."""

    def test_missing_row_is_zero(self):
        assert get_token_balance("nobody") == 0

    def test_set_and_get(self):
        set_token_balance("u1", 30)
        assert get_token_balance("u1") == 30

    def test_update_replaces(self):
        set_token_balance("u1", 30)
        set_token_balance("u1", 12)
        assert get_token_balance("u1") == 12

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            set_token_balance("u1", -1)


class TestAnalyzerRequests:
    """Test analyzer request tracking."""

    def test_completed_request_counts(self):
        record_analyzer_request("u1", "nfl-v1", status=STATUS_COMPLETED)
        assert get_completed_analyzer_ids("u1") == {"nfl-v1"}

    def test_pending_request_does_not_count_until_completed(self):
        request_id = record_analyzer_request("u1", "nfl-v1")
        assert get_completed_analyzer_ids("u1") == set()

        assert complete_analyzer_request(request_id) is True
        assert get_completed_analyzer_ids("u1") == {"nfl-v1"}

    def test_failed_request_does_not_count(self):
        record_analyzer_request("u1", "nba-v2", status=STATUS_FAILED)
        assert get_completed_analyzer_ids("u1") == set()

    def test_distinct_model_ids(self):
        record_analyzer_request("u1", "nfl-v1", status=STATUS_COMPLETED)
        record_analyzer_request("u1", "nfl-v1", status=STATUS_COMPLETED)
        record_analyzer_request("u1", "mlb-v1", status=STATUS_COMPLETED)
        assert get_completed_analyzer_ids("u1") == {"nfl-v1", "mlb-v1"}

    def test_invalid_status(self):
        with pytest.raises(ValueError):
            record_analyzer_request("u1", "nfl-v1", status="running")

    def test_complete_unknown_request(self):
        assert complete_analyzer_request("missing") is False


class TestContestEntries:
    """Test contest entry storage."""

    def test_record_and_list(self):
        entry_id = record_contest_entry("u1", "week-1")
        record_contest_entry("u1", "week-2")

        assert entry_id is not None
        assert get_joined_contest_ids("u1") == {"week-1", "week-2"}

    def test_duplicate_entry_ignored(self):
        record_contest_entry("u1", "week-1")
        assert record_contest_entry("u1", "week-1") is None
        assert get_joined_contest_ids("u1") == {"week-1"}

    def test_entries_are_per_user(self):
        record_contest_entry("u2", "week-1")
        assert get_joined_contest_ids("u1") == set()


class TestPageViews:
    """Test page view analytics."""

    def test_record_and_count(self):
        record_page_view("page-1", "mobile")
        record_page_view("page-1", "desktop", user_id="u1")
        record_page_view("page-2", "desktop")

        assert get_page_view_count("page-1") == 2
        assert get_page_view_count("page-1", device_type="mobile") == 1

    def test_since_window(self):
        record_page_view("page-1", "mobile")
        future = datetime.utcnow() + timedelta(minutes=5)
        assert get_page_view_count("page-1", since=future) == 0


class TestBlockInteractions:
    """Test block interaction analytics."""

    def test_summary(self):
        record_block_interaction("block-1", "click")
        record_block_interaction("block-1", "click", user_id="u1")
        record_block_interaction("block-1", "unlock", tokens_spent=10, user_id="u1")

        summary = get_block_interaction_summary("block-1")
        assert summary["block_id"] == "block-1"
        assert summary["interactions"] == {"click": 2, "unlock": 1}
        assert summary["total_interactions"] == 3
        assert summary["tokens_spent"] == 10

    def test_empty_summary(self):
        summary = get_block_interaction_summary("block-x")
        assert summary["total_interactions"] == 0
        assert summary["tokens_spent"] == 0

    def test_negative_tokens_rejected(self):
        with pytest.raises(ValueError):
            record_block_interaction("block-1", "unlock", tokens_spent=-5)
