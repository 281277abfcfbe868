# persistence/__init__.py
"""
Persistence layer.

Provides SQLite-backed storage for:
- Viewer activity (token balance, analyzer runs, contest entries)
- Page analytics (page views, block interactions)

Accounts and CMS pages keep their SQL next to their models (auth/, pages/)
and share the connection handling here.
"""

from persistence.db import get_db, init_db, close_db
from persistence.activity import (
    get_token_balance,
    set_token_balance,
    record_analyzer_request,
    complete_analyzer_request,
    get_completed_analyzer_ids,
    record_contest_entry,
    get_joined_contest_ids,
)
from persistence.analytics import record_page_view, record_block_interaction

__all__ = [
    "get_db",
    "init_db",
    "close_db",
    "get_token_balance",
    "set_token_balance",
    "record_analyzer_request",
    "complete_analyzer_request",
    "get_completed_analyzer_ids",
    "record_contest_entry",
    "get_joined_contest_ids",
    "record_page_view",
    "record_block_interaction",
]
