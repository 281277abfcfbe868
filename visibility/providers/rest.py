# visibility/providers/rest.py
"""
REST Profile Provider

Reads viewer facts from a hosted PostgREST-style data API (the hosted
database platform the product's web client talks to).

Endpoints used (relative to the project URL):
- GET /rest/v1/user_tokens?select=balance&user_id=eq.<id>
- GET /rest/v1/analyzer_requests?select=model_id&user_id=eq.<id>&status=eq.completed
- GET /rest/v1/contest_entries?select=contest_id&user_id=eq.<id>

Configuration via environment variables (see app.config):
- PROFILE_REST_URL: Project base URL
- PROFILE_REST_KEY: Service key sent as apikey and bearer token
- PROFILE_REST_TIMEOUT: HTTP timeout in seconds (default: 10)
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from visibility.profile import VisibilityProfile, member_profile
from visibility.providers.base import ProfileProvider

_logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


class RestProfileProvider(ProfileProvider):
    """Profile provider backed by a hosted REST data API."""

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Args:
            base_url: Project URL (e.g. https://xyz.example.co)
            api_key: Key for the apikey/Authorization headers
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests use MockTransport)
        """
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    @property
    def source_name(self) -> str:
        return "rest"

    def is_available(self) -> bool:
        return bool(self._base_url)

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["apikey"] = self._api_key
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def _select(self, client: httpx.Client, table: str, params: dict[str, str]) -> list[dict]:
        response = client.get(f"/rest/v1/{table}", params=params)
        response.raise_for_status()
        rows = response.json()
        if not isinstance(rows, list):
            raise ValueError(f"Expected a list of rows from {table}, got {type(rows).__name__}")
        return [row for row in rows if isinstance(row, dict)]

    def fetch(self, user_id: str) -> Optional[VisibilityProfile]:
        user_filter = f"eq.{user_id}"

        try:
            with httpx.Client(
                base_url=self._base_url,
                headers=self._headers(),
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                token_rows = self._select(
                    client, "user_tokens", {"select": "balance", "user_id": user_filter}
                )
                analyzer_rows = self._select(
                    client,
                    "analyzer_requests",
                    {"select": "model_id", "user_id": user_filter, "status": "eq.completed"},
                )
                contest_rows = self._select(
                    client, "contest_entries", {"select": "contest_id", "user_id": user_filter}
                )
        except httpx.HTTPError as e:
            _logger.warning(f"Profile fetch from {self._base_url} failed for user {user_id}: {e}")
            return None
        except ValueError as e:
            # JSON decode errors are ValueErrors too
            _logger.warning(f"Unreadable profile data for user {user_id}: {e}")
            return None

        return member_profile(
            user_id=user_id,
            token_balance=_first_balance(token_rows),
            used_analyzer_ids=_column(analyzer_rows, "model_id"),
            joined_contest_ids=_column(contest_rows, "contest_id"),
            source=self.source_name,
        )


def _first_balance(rows: list[dict]) -> int:
    """Balance from the first row; missing or non-numeric => 0."""
    if not rows:
        return 0
    balance: Any = rows[0].get("balance")
    if isinstance(balance, bool) or not isinstance(balance, (int, float)):
        return 0
    return int(balance)


def _column(rows: list[dict], name: str) -> set[str]:
    return {str(row[name]) for row in rows if row.get(name)}
