# pages/store.py
"""
Page and block storage.

Reads and writes page_layouts and ui_blocks. Only published pages are
served by slug.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Optional
from uuid import uuid4

from pages.models import BlockType, PageLayout, UIBlock
from persistence.db import get_db, init_db

_logger = logging.getLogger(__name__)


def create_page(
    name: str,
    slug: str,
    description: Optional[str] = None,
    is_published: bool = False,
    metadata: Optional[dict] = None,
    visibility_rules: Optional[dict] = None,
) -> PageLayout:
    """
    Create a page layout.

    Raises:
        sqlite3.IntegrityError: If the slug is already taken
    """
    init_db()

    page = PageLayout(
        id=str(uuid4()),
        name=name,
        slug=slug.strip().lower(),
        description=description,
        is_published=is_published,
        metadata=metadata or {},
        visibility_rules=visibility_rules or {},
    )
    now = datetime.utcnow().isoformat()

    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO page_layouts
            (id, name, slug, description, is_published, metadata_json,
             visibility_rules_json, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                page.id,
                page.name,
                page.slug,
                page.description,
                int(page.is_published),
                json.dumps(page.metadata),
                json.dumps(page.visibility_rules),
                now,
                now,
            ),
        )

    _logger.info(f"Created page {page.slug} ({page.id})")
    return page


def set_page_published(page_id: str, is_published: bool) -> bool:
    """Publish or unpublish a page. Returns False if not found."""
    init_db()

    with get_db() as conn:
        cursor = conn.execute(
            "UPDATE page_layouts SET is_published = ?, updated_at = ? WHERE id = ?",
            (int(is_published), datetime.utcnow().isoformat(), page_id),
        )
        return cursor.rowcount > 0


def get_published_page(slug: str) -> Optional[PageLayout]:
    """Get a published page by slug. Returns None if missing or unpublished."""
    if not slug:
        return None

    init_db()

    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM page_layouts WHERE slug = ? AND is_published = 1",
            (slug.strip().lower(),),
        ).fetchone()

    if row is None:
        return None

    return _row_to_page(row)


def add_block(
    page_id: str,
    title: str,
    block_type: BlockType,
    position: int = 0,
    description: Optional[str] = None,
    content: Optional[dict] = None,
    background_color: Optional[str] = None,
    visibility_rules: Optional[dict] = None,
    animation: Optional[str] = None,
    layout_mode: Optional[str] = None,
) -> UIBlock:
    """Add a block to a page."""
    init_db()

    block = UIBlock(
        id=str(uuid4()),
        page_id=page_id,
        title=title,
        block_type=BlockType(block_type),
        position=position,
        description=description,
        content=content or {},
        background_color=background_color,
        visibility_rules=visibility_rules or {},
        animation=animation,
        layout_mode=layout_mode,
    )

    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO ui_blocks
            (id, page_id, title, description, block_type, content_json, position,
             background_color, visibility_rules_json, animation, layout_mode, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                block.id,
                block.page_id,
                block.title,
                block.description,
                block.block_type.value,
                json.dumps(block.content),
                block.position,
                block.background_color,
                json.dumps(block.visibility_rules),
                block.animation,
                block.layout_mode,
                datetime.utcnow().isoformat(),
            ),
        )

    return block


def get_blocks_for_page(page_id: str) -> list[UIBlock]:
    """Get a page's blocks in position order."""
    init_db()

    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM ui_blocks WHERE page_id = ? ORDER BY position ASC, rowid ASC",
            (page_id,),
        ).fetchall()

    blocks = []
    for row in rows:
        block = _row_to_block(row)
        if block is not None:
            blocks.append(block)
    return blocks


def _load_json_object(raw: Optional[str]) -> dict[str, Any]:
    """Decode stored JSON; anything that is not an object becomes {}."""
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except ValueError:
        return {}
    return value if isinstance(value, dict) else {}


def _row_to_page(row) -> PageLayout:
    return PageLayout(
        id=row["id"],
        name=row["name"],
        slug=row["slug"],
        description=row["description"],
        is_published=bool(row["is_published"]),
        metadata=_load_json_object(row["metadata_json"]),
        visibility_rules=_load_json_object(row["visibility_rules_json"]),
    )


def _row_to_block(row) -> Optional[UIBlock]:
    try:
        block_type = BlockType(row["block_type"])
    except ValueError:
        _logger.warning(f"Skipping block {row['id']} with unknown type {row['block_type']!r}")
        return None

    return UIBlock(
        id=row["id"],
        page_id=row["page_id"],
        title=row["title"],
        block_type=block_type,
        position=row["position"],
        description=row["description"],
        content=_load_json_object(row["content_json"]),
        background_color=row["background_color"],
        visibility_rules=_load_json_object(row["visibility_rules_json"]),
        animation=row["animation"],
        layout_mode=row["layout_mode"],
    )
