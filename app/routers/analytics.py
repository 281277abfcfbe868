# app/routers/analytics.py
"""
Analytics API Router - record page views and block interactions.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request, status

from app.correlation import get_request_id
from app.schemas.visibility import BlockInteractionRequest, PageViewRequest
from auth.middleware import get_optional_user
from auth.models import User
from persistence.analytics import record_block_interaction, record_page_view
from visibility.device import resolve_device_class

router = APIRouter(
    prefix="/analytics",
    tags=["Analytics"],
)


@router.post("/page-views", status_code=status.HTTP_201_CREATED)
async def page_view(
    body: PageViewRequest,
    request: Request,
    user: Optional[User] = Depends(get_optional_user),
):
    """Record a page view with the viewer's device type."""
    device_class = resolve_device_class(body.viewport_width, request.headers.get("user-agent"))
    record_page_view(
        body.page_id,
        device_class.value,
        user_id=user.id if user else None,
    )
    return {
        "request_id": get_request_id(request),
        "device_type": device_class.value,
    }


@router.post("/block-interactions", status_code=status.HTTP_201_CREATED)
async def block_interaction(
    body: BlockInteractionRequest,
    request: Request,
    user: Optional[User] = Depends(get_optional_user),
):
    """Record an interaction with a block (view, click, token spend)."""
    record_block_interaction(
        body.block_id,
        body.interaction_type,
        tokens_spent=body.tokens_spent,
        user_id=user.id if user else None,
    )
    return {
        "request_id": get_request_id(request),
        "recorded": True,
    }
