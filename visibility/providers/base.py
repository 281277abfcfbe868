# visibility/providers/base.py
"""
Base Profile Provider Interface

Every source of viewer facts (database, hosted data API, fixtures)
implements this interface so the profile service can swap them freely.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from visibility.profile import VisibilityProfile


class ProfileProvider(ABC):
    """
    Abstract base class for visibility profile providers.

    Each provider:
    1. Reads the viewer's token balance, completed analyzer runs and
       contest entries from its source
    2. Builds an authenticated VisibilityProfile from them
    """

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Identifier for this data source."""
        ...

    @abstractmethod
    def fetch(self, user_id: str) -> Optional[VisibilityProfile]:
        """
        Fetch the profile of a signed-in user.

        Returns None if the fetch fails. Does not raise for data source
        errors; the caller substitutes the fail-closed profile.
        """
        ...

    def is_available(self) -> bool:
        """
        Check if this provider is currently usable.

        Default implementation returns True.
        """
        return True
