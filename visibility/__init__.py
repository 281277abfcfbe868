# visibility/__init__.py
"""
Visibility Module

Decides, per page and per block, whether a viewer may see content.

Module Structure:
- rules.py: VisibilityRule (permissive parse of stored JSON rules)
- profile.py: VisibilityProfile (immutable viewer facts)
- device.py: Device class helper (viewport width => mobile/desktop)
- evaluator.py: The rule evaluator (pure, total)
- providers/: Profile sources (database, hosted REST API, static)
- service.py: Profile construction, caching and fail-closed fallback
"""

from visibility.device import DeviceClass, classify_device, resolve_device_class
from visibility.evaluator import HiddenReason, VisibilityDecision, explain_visibility, is_visible
from visibility.profile import VisibilityProfile, anonymous_profile, member_profile
from visibility.rules import VisibilityRule, parse_rule

__all__ = [
    "DeviceClass",
    "classify_device",
    "resolve_device_class",
    "HiddenReason",
    "VisibilityDecision",
    "explain_visibility",
    "is_visible",
    "VisibilityProfile",
    "anonymous_profile",
    "member_profile",
    "VisibilityRule",
    "parse_rule",
]
