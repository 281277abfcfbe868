# pages/renderer.py
"""
Block/Page Renderer.

Composes a page for one viewer: applies the page's own rule, then keeps
only the blocks the viewer may see, in position order. Every visibility
decision goes through visibility.evaluator.
"""

from __future__ import annotations

from typing import Iterable

from pages.errors import PageHiddenError
from pages.models import ComposedPage, PageLayout, UIBlock
from visibility.evaluator import explain_visibility, is_visible
from visibility.profile import VisibilityProfile


def visible_blocks(blocks: Iterable[UIBlock], profile: VisibilityProfile) -> list[UIBlock]:
    """Blocks the profile may see, sorted by position (ties keep input order)."""
    shown = [b for b in blocks if is_visible(b.visibility_rules, profile)]
    return sorted(shown, key=lambda b: b.position)


def compose_page(
    page: PageLayout,
    blocks: Iterable[UIBlock],
    profile: VisibilityProfile,
) -> ComposedPage:
    """
    Compose a page for a resolved profile.

    Callers must pass the viewer's real profile, never a placeholder
    standing in while it loads.

    Raises:
        PageHiddenError: If the page's own rule hides it from this viewer
    """
    decision = explain_visibility(page.visibility_rules, profile)
    if not decision.visible:
        raise PageHiddenError(page.slug, decision.reason)

    all_blocks = list(blocks)
    shown = visible_blocks(all_blocks, profile)

    return ComposedPage(
        page=page,
        blocks=tuple(shown),
        hidden_count=len(all_blocks) - len(shown),
    )
