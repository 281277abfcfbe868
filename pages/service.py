# pages/service.py
"""
Page rendering entry point.

Loads a published page and its blocks, waits for the viewer's profile,
and composes the page. Nothing is composed until the profile has
resolved, and a result for a viewer who has gone away is discarded.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from pages.errors import PageNotFoundError, RenderCancelledError
from pages.models import ComposedPage
from pages.renderer import compose_page
from pages.store import get_blocks_for_page, get_published_page
from visibility.device import DeviceClass
from visibility.service import ProfileService, get_profile_service

_logger = logging.getLogger(__name__)

CancelCheck = Callable[[], Awaitable[bool]]


async def render_page(
    slug: str,
    user_id: Optional[str],
    device_class: DeviceClass = DeviceClass.DESKTOP,
    is_cancelled: Optional[CancelCheck] = None,
    profile_service: Optional[ProfileService] = None,
) -> ComposedPage:
    """
    Render a published page for a viewer.

    Args:
        slug: Page slug
        user_id: Signed-in user id, or None for anonymous viewers
        device_class: Device classification of the request
        is_cancelled: Async check called once the profile resolves; True
            means the viewer went away and the result must be dropped
        profile_service: Service to fetch the profile from (default: singleton)

    Returns:
        ComposedPage with only the visible blocks

    Raises:
        PageNotFoundError: No published page with this slug
        PageHiddenError: The page rule hides it from this viewer
        RenderCancelledError: The viewer went away while the profile loaded
    """
    page = await asyncio.to_thread(get_published_page, slug)
    if page is None:
        raise PageNotFoundError(slug)

    blocks = await asyncio.to_thread(get_blocks_for_page, page.id)

    service = profile_service or get_profile_service()
    profile = await asyncio.to_thread(service.get_profile, user_id, device_class)

    if is_cancelled is not None and await is_cancelled():
        _logger.info(f"Discarding render of {slug}: viewer disconnected")
        raise RenderCancelledError(slug)

    composed = compose_page(page, blocks, profile)
    _logger.debug(
        f"Rendered {slug} for {user_id or 'anonymous'} ({device_class.value}): "
        f"{len(composed.blocks)} shown, {composed.hidden_count} hidden"
    )
    return composed
