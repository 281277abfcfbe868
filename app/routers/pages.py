# app/routers/pages.py
"""
Pages API Router.

Serves published CMS pages with only the blocks the current viewer may
see. The device class comes from the viewport_width query parameter the
client reports, falling back to the User-Agent header.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from app.correlation import get_request_id
from app.errors import CLIENT_CLOSED_REQUEST, error_response
from app.schemas.visibility import RenderedPageResponse
from auth.middleware import get_optional_user
from auth.models import User
from pages.errors import PageHiddenError, PageNotFoundError, RenderCancelledError
from pages.service import render_page
from visibility.device import resolve_device_class

router = APIRouter(
    prefix="/pages",
    tags=["Pages"],
)


@router.get(
    "/{slug}",
    response_model=RenderedPageResponse,
    responses={
        200: {"description": "Page with the viewer's visible blocks"},
        403: {"description": "The page rule hides it from this viewer"},
        404: {"description": "No published page with this slug"},
    },
)
async def get_page(
    slug: str,
    request: Request,
    viewport_width: Optional[int] = Query(default=None, ge=0, description="Client viewport width in px"),
    user: Optional[User] = Depends(get_optional_user),
):
    """Render a published page for the current viewer."""
    device_class = resolve_device_class(viewport_width, request.headers.get("user-agent"))

    try:
        composed = await render_page(
            slug,
            user.id if user else None,
            device_class=device_class,
            is_cancelled=request.is_disconnected,
        )
    except PageNotFoundError as exc:
        return error_response(request, 404, "not_found", str(exc))
    except PageHiddenError as exc:
        return error_response(
            request,
            403,
            "page_not_visible",
            str(exc),
            reason=exc.reason.value if exc.reason else None,
        )
    except RenderCancelledError as exc:
        return error_response(request, CLIENT_CLOSED_REQUEST, "client_closed_request", str(exc))

    return RenderedPageResponse(
        request_id=get_request_id(request),
        device_class=device_class.value,
        **composed.to_dict(),
    )
