# visibility/profile.py
"""
VisibilityProfile - what is known about the viewer at evaluation time.

Profiles are immutable. When the underlying data changes (a token spend,
a contest entry) a new profile is fetched; nothing patches one in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Iterable, Optional

from visibility.device import DeviceClass


# Role assigned to every signed-in viewer. There is no role lookup.
AUTHENTICATED_ROLE = "user"


@dataclass(frozen=True)
class VisibilityProfile:
    """
    Viewer facts a visibility rule is evaluated against.

    Attributes:
        is_authenticated: Whether the viewer is signed in
        token_balance: Current token balance (never negative)
        used_analyzer_ids: Analyzer ids with a completed request by the viewer
        joined_contest_ids: Contest ids the viewer has an entry in
        device_class: Viewport class for this request (not persisted)
        user_id: Viewer's user id, None for anonymous viewers
        source: Which provider built this profile
        as_of: When the underlying data was read
    """
    is_authenticated: bool = False
    token_balance: int = 0
    used_analyzer_ids: frozenset[str] = field(default_factory=frozenset)
    joined_contest_ids: frozenset[str] = field(default_factory=frozenset)
    device_class: DeviceClass = DeviceClass.DESKTOP
    user_id: Optional[str] = None
    source: str = "none"
    as_of: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        """Normalize collections to frozensets and clamp the balance."""
        object.__setattr__(self, "used_analyzer_ids", frozenset(self.used_analyzer_ids))
        object.__setattr__(self, "joined_contest_ids", frozenset(self.joined_contest_ids))
        object.__setattr__(self, "token_balance", max(0, int(self.token_balance or 0)))

    @property
    def role(self) -> Optional[str]:
        """"user" for signed-in viewers, None otherwise."""
        return AUTHENTICATED_ROLE if self.is_authenticated else None

    def with_device(self, device_class: DeviceClass) -> VisibilityProfile:
        """Return a copy classified for another device."""
        if device_class == self.device_class:
            return self
        return replace(self, device_class=device_class)

    def to_dict(self) -> dict:
        """Convert to a JSON-friendly dict."""
        return {
            "user_id": self.user_id,
            "is_authenticated": self.is_authenticated,
            "role": self.role,
            "token_balance": self.token_balance,
            "used_analyzer_ids": sorted(self.used_analyzer_ids),
            "joined_contest_ids": sorted(self.joined_contest_ids),
            "device_class": self.device_class.value,
            "source": self.source,
            "as_of": self.as_of.isoformat(),
        }


def member_profile(
    user_id: str,
    token_balance: int = 0,
    used_analyzer_ids: Iterable[str] = (),
    joined_contest_ids: Iterable[str] = (),
    source: str = "none",
    device_class: DeviceClass = DeviceClass.DESKTOP,
) -> VisibilityProfile:
    """Build the profile of a signed-in viewer."""
    return VisibilityProfile(
        is_authenticated=True,
        token_balance=token_balance,
        used_analyzer_ids=frozenset(used_analyzer_ids),
        joined_contest_ids=frozenset(joined_contest_ids),
        device_class=device_class,
        user_id=user_id,
        source=source,
    )


def anonymous_profile(
    source: str = "anonymous",
    device_class: DeviceClass = DeviceClass.DESKTOP,
) -> VisibilityProfile:
    """
    The most restrictive profile: signed out, zero tokens, no history.

    Used for anonymous viewers and as the fail-closed substitute when a
    profile cannot be fetched.
    """
    return VisibilityProfile(
        is_authenticated=False,
        token_balance=0,
        used_analyzer_ids=frozenset(),
        joined_contest_ids=frozenset(),
        device_class=device_class,
        user_id=None,
        source=source,
    )
