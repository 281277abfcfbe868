# pages/__init__.py
"""
Pages Module

CMS pages composed of blocks, served per viewer.

Module Structure:
- models.py: PageLayout, UIBlock, ComposedPage
- store.py: Page and block storage
- renderer.py: Visibility filtering and ordering
- service.py: Async render entry point (load, await profile, compose)
- errors.py: PageNotFoundError, PageHiddenError, RenderCancelledError
"""

from pages.errors import PageError, PageHiddenError, PageNotFoundError, RenderCancelledError
from pages.models import BlockType, ComposedPage, PageLayout, UIBlock
from pages.renderer import compose_page, visible_blocks

__all__ = [
    "PageError",
    "PageHiddenError",
    "PageNotFoundError",
    "RenderCancelledError",
    "BlockType",
    "ComposedPage",
    "PageLayout",
    "UIBlock",
    "compose_page",
    "visible_blocks",
]
