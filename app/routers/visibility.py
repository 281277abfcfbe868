# app/routers/visibility.py
"""
Visibility API Router.

Lets clients gate arbitrary UI on the same evaluator the page renderer
uses, and inspect or refresh the viewer's profile after an action that
changes it (token spend, contest entry, analyzer run).
"""
from __future__ import annotations

import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from app.correlation import get_request_id
from app.schemas.visibility import (
    ProfileResponse,
    ProfileSchema,
    VisibilityCheckRequest,
    VisibilityCheckResponse,
)
from auth.middleware import get_optional_user
from auth.models import User
from visibility.device import resolve_device_class
from visibility.evaluator import explain_visibility
from visibility.profile import VisibilityProfile
from visibility.rules import parse_rule
from visibility.service import get_profile_service

router = APIRouter(
    prefix="/visibility",
    tags=["Visibility"],
)


async def _viewer_profile(
    request: Request,
    user: Optional[User],
    viewport_width: Optional[int],
    force_refresh: bool = False,
) -> VisibilityProfile:
    device_class = resolve_device_class(viewport_width, request.headers.get("user-agent"))
    return await asyncio.to_thread(
        get_profile_service().get_profile,
        user.id if user else None,
        device_class,
        force_refresh,
    )


def _profile_response(request: Request, profile: VisibilityProfile) -> ProfileResponse:
    return ProfileResponse(
        request_id=get_request_id(request),
        profile=ProfileSchema(**profile.to_dict()),
    )


@router.post("/check", response_model=VisibilityCheckResponse)
async def check_visibility(
    body: VisibilityCheckRequest,
    request: Request,
    user: Optional[User] = Depends(get_optional_user),
):
    """
    Evaluate a rule for the current viewer.

    Unknown or malformed rule fields are ignored, so a rule that names
    nothing usable is visible to everyone.
    """
    profile = await _viewer_profile(request, user, body.viewport_width)
    rule = parse_rule(body.rule)
    decision = explain_visibility(rule, profile)

    return VisibilityCheckResponse(
        request_id=get_request_id(request),
        rule=rule.to_json(),
        **decision.to_dict(),
    )


@router.get("/profile", response_model=ProfileResponse)
async def get_viewer_profile(
    request: Request,
    viewport_width: Optional[int] = Query(default=None, ge=0),
    user: Optional[User] = Depends(get_optional_user),
):
    """Get the current viewer's visibility profile."""
    profile = await _viewer_profile(request, user, viewport_width)
    return _profile_response(request, profile)


@router.post("/profile/refresh", response_model=ProfileResponse)
async def refresh_viewer_profile(
    request: Request,
    viewport_width: Optional[int] = Query(default=None, ge=0),
    user: Optional[User] = Depends(get_optional_user),
):
    """Drop the viewer's cached profile and return a freshly fetched one."""
    profile = await _viewer_profile(request, user, viewport_width, force_refresh=True)
    return _profile_response(request, profile)
