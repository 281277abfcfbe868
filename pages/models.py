# pages/models.py
"""
Page and block models for CMS-composed pages.

A page layout owns an ordered list of blocks. The page and each block
carry their own visibility rule (stored JSON, evaluated per viewer).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class BlockType(str, Enum):
    """Kinds of content a block can hold."""
    ANALYZER = "analyzer"
    CONTEST = "contest"
    LEADERBOARD = "leaderboard"
    AD = "ad"
    TEXT = "text"
    CUSTOM = "custom"


# Block animation that triggers the celebration effect
CELEBRATION_ANIMATION = "confetti"


@dataclass(frozen=True)
class PageLayout:
    """A CMS page addressed by slug."""
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    is_published: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)
    visibility_rules: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "is_published": self.is_published,
            "metadata": self.metadata,
        }


@dataclass(frozen=True)
class UIBlock:
    """One unit of page content with its own visibility rule."""
    id: str
    page_id: str
    title: str
    block_type: BlockType
    position: int = 0
    description: Optional[str] = None
    content: dict[str, Any] = field(default_factory=dict)
    background_color: Optional[str] = None
    visibility_rules: dict[str, Any] = field(default_factory=dict)
    animation: Optional[str] = None
    layout_mode: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "page_id": self.page_id,
            "title": self.title,
            "description": self.description,
            "block_type": self.block_type.value,
            "content": self.content,
            "position": self.position,
            "background_color": self.background_color,
            "animation": self.animation,
            "layout_mode": self.layout_mode,
        }


@dataclass(frozen=True)
class ComposedPage:
    """
    A page as one viewer sees it.

    Attributes:
        page: The page layout
        blocks: Visible blocks in position order
        hidden_count: How many blocks the viewer's profile hid
    """
    page: PageLayout
    blocks: tuple[UIBlock, ...] = ()
    hidden_count: int = 0

    @property
    def celebrate(self) -> bool:
        """True when a visible block asks for the confetti effect."""
        return any(b.animation == CELEBRATION_ANIMATION for b in self.blocks)

    def to_dict(self) -> dict:
        return {
            "page": self.page.to_dict(),
            "blocks": [b.to_dict() for b in self.blocks],
            "hidden_count": self.hidden_count,
            "celebrate": self.celebrate,
        }
