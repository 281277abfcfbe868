# pages/errors.py
"""Page rendering errors."""

from __future__ import annotations

from typing import Optional

from visibility.evaluator import HiddenReason


class PageError(Exception):
    """Base page rendering error."""
    pass


class PageNotFoundError(PageError):
    """No published page has this slug."""

    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f"Page '{slug}' not found or not published")


class PageHiddenError(PageError):
    """The page's own visibility rule hides it from this viewer."""

    def __init__(self, slug: str, reason: Optional[HiddenReason]):
        self.slug = slug
        self.reason = reason
        reason_str = reason.value if reason else "unknown"
        super().__init__(f"Page '{slug}' is not visible to this viewer ({reason_str})")


class RenderCancelledError(PageError):
    """The viewer went away before the profile resolved; the result was discarded."""

    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f"Render of page '{slug}' cancelled")
