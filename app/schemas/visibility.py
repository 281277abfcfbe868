# app/schemas/visibility.py
"""
Pydantic schemas for the pages, visibility, analytics and auth APIs.

Uses snake_case to match existing API conventions. Visibility rules stay
raw JSON: the evaluator parses them permissively, so the API does not
validate their shape.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field


# =============================================================================
# Request Schemas
# =============================================================================


class VisibilityCheckRequest(BaseModel):
    """Evaluate one rule for the current viewer."""
    # Anything that is not a JSON object parses to the empty rule
    rule: Any = None
    viewport_width: Optional[int] = Field(default=None, ge=0)


class PageViewRequest(BaseModel):
    """Page view analytics event."""
    page_id: str = Field(min_length=1)
    viewport_width: Optional[int] = Field(default=None, ge=0)


class BlockInteractionRequest(BaseModel):
    """Block interaction analytics event."""
    block_id: str = Field(min_length=1)
    interaction_type: str = Field(min_length=1, max_length=64)
    tokens_spent: int = Field(default=0, ge=0)


class SignupRequest(BaseModel):
    email: EmailStr
    password: str


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


# =============================================================================
# Response Schemas
# =============================================================================


class ProfileSchema(BaseModel):
    """Visibility profile as exposed to its owner."""
    user_id: Optional[str] = None
    is_authenticated: bool
    role: Optional[str] = None
    token_balance: int
    used_analyzer_ids: List[str]
    joined_contest_ids: List[str]
    device_class: str
    source: str
    as_of: str


class VisibilityCheckResponse(BaseModel):
    request_id: str
    visible: bool
    reason: Optional[str] = None
    rule: Dict[str, Any]


class ProfileResponse(BaseModel):
    request_id: str
    profile: ProfileSchema


class BlockSchema(BaseModel):
    id: str
    page_id: str
    title: str
    description: Optional[str] = None
    block_type: str
    content: Dict[str, Any] = Field(default_factory=dict)
    position: int
    background_color: Optional[str] = None
    animation: Optional[str] = None
    layout_mode: Optional[str] = None


class PageSchema(BaseModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    is_published: bool
    metadata: Dict[str, Any] = Field(default_factory=dict)


class RenderedPageResponse(BaseModel):
    """A page with only the blocks the viewer may see."""
    request_id: str
    page: PageSchema
    blocks: List[BlockSchema]
    hidden_count: int
    celebrate: bool
    device_class: str


class UserSchema(BaseModel):
    id: str
    email: str
    created_at: str


class AuthResponse(BaseModel):
    request_id: str
    user: UserSchema
