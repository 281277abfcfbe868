# visibility/providers/static.py
"""
Static Profile Provider

Serves profiles from an in-memory table. Used for demos and tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from visibility.profile import VisibilityProfile, member_profile
from visibility.providers.base import ProfileProvider


@dataclass(frozen=True)
class ViewerFacts:
    """Raw facts for one viewer."""
    token_balance: int = 0
    used_analyzer_ids: frozenset[str] = field(default_factory=frozenset)
    joined_contest_ids: frozenset[str] = field(default_factory=frozenset)


class StaticProfileProvider(ProfileProvider):
    """Profile provider over a fixed user_id -> ViewerFacts table."""

    def __init__(self, facts: Optional[dict[str, ViewerFacts]] = None):
        self._facts: dict[str, ViewerFacts] = dict(facts or {})
        self.fetch_count = 0

    @property
    def source_name(self) -> str:
        return "static"

    def set_facts(
        self,
        user_id: str,
        token_balance: int = 0,
        used_analyzer_ids: Iterable[str] = (),
        joined_contest_ids: Iterable[str] = (),
    ) -> None:
        """Replace the facts for a user."""
        self._facts[user_id] = ViewerFacts(
            token_balance=token_balance,
            used_analyzer_ids=frozenset(used_analyzer_ids),
            joined_contest_ids=frozenset(joined_contest_ids),
        )

    def fetch(self, user_id: str) -> Optional[VisibilityProfile]:
        self.fetch_count += 1
        facts = self._facts.get(user_id, ViewerFacts())
        return member_profile(
            user_id=user_id,
            token_balance=facts.token_balance,
            used_analyzer_ids=facts.used_analyzer_ids,
            joined_contest_ids=facts.joined_contest_ids,
            source=self.source_name,
        )
