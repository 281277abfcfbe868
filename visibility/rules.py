# visibility/rules.py
"""
VisibilityRule - declarative predicate attached to a page or block.

Rules arrive as JSON stored on CMS records. Parsing is permissive:
- unknown keys are ignored
- a known key with a value of the wrong type counts as absent
- anything that is not a JSON object parses to the empty rule

The empty rule means "always visible".
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional, Union

from visibility.device import DeviceClass, parse_device_class


# Stored JSON key for each rule attribute
_JSON_KEYS = {
    "requires_auth": "requiresAuth",
    "min_tokens": "minTokens",
    "has_used_analyzer": "hasUsedAnalyzer",
    "has_used_any_analyzer": "hasUsedAnyAnalyzer",
    "joined_contest": "joinedContest",
    "has_joined_any_contest": "hasJoinedAnyContest",
    "device": "device",
    "roles": "roles",
}

# Older page records use loggedIn for requiresAuth
AUTH_ALIAS_KEY = "loggedIn"


@dataclass(frozen=True)
class VisibilityRule:
    """
    Parsed visibility rule.

    Every attribute is optional; None means the condition is not part of
    the rule. A block is visible iff every present condition passes.

    Attributes:
        requires_auth: True => viewer must be signed in
        min_tokens: Viewer's token balance must be >= this
        has_used_analyzer: Analyzer id the viewer must have a completed run of
        has_used_any_analyzer: True => viewer has run at least one analyzer
        joined_contest: Contest id the viewer must have entered
        has_joined_any_contest: True => viewer has entered at least one contest
        device: Required device class
        roles: Allowed viewer roles (compatibility field)
    """
    requires_auth: Optional[bool] = None
    min_tokens: Optional[Union[int, float]] = None
    has_used_analyzer: Optional[Union[str, int]] = None
    has_used_any_analyzer: Optional[bool] = None
    joined_contest: Optional[Union[str, int]] = None
    has_joined_any_contest: Optional[bool] = None
    device: Optional[DeviceClass] = None
    roles: Optional[frozenset[str]] = None

    @property
    def is_empty(self) -> bool:
        """True when no condition is present."""
        return all(getattr(self, f.name) is None for f in fields(self))

    @classmethod
    def from_json(cls, raw: Any) -> VisibilityRule:
        """Parse a stored rule. Never raises."""
        if isinstance(raw, VisibilityRule):
            return raw
        if not isinstance(raw, Mapping) or not raw:
            return EMPTY_RULE

        requires_auth = _parse_flag(raw.get("requiresAuth"))
        if requires_auth is None:
            requires_auth = _parse_flag(raw.get(AUTH_ALIAS_KEY))

        return cls(
            requires_auth=requires_auth,
            min_tokens=_parse_number(raw.get("minTokens")),
            has_used_analyzer=_parse_id(raw.get("hasUsedAnalyzer")),
            has_used_any_analyzer=_parse_flag(raw.get("hasUsedAnyAnalyzer")),
            joined_contest=_parse_id(raw.get("joinedContest")),
            has_joined_any_contest=_parse_flag(raw.get("hasJoinedAnyContest")),
            device=parse_device_class(raw.get("device")),
            roles=_parse_roles(raw.get("roles"), raw.get("role")),
        )

    def to_json(self) -> dict:
        """Serialize present conditions with their stored JSON keys."""
        out: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, DeviceClass):
                value = value.value
            elif isinstance(value, frozenset):
                value = sorted(value)
            elif isinstance(value, float) and value.is_integer():
                value = int(value)
            out[_JSON_KEYS[f.name]] = value
        return out


EMPTY_RULE = VisibilityRule()

RuleInput = Union[VisibilityRule, Mapping[str, Any], None]


def _parse_flag(value: Any) -> Optional[bool]:
    """Only real booleans count; "true" strings and 1/0 do not."""
    if isinstance(value, bool):
        return value
    return None


def _parse_number(value: Any) -> Optional[Union[int, float]]:
    # bool is an int subclass; minTokens: true is not a threshold
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return value
    return None


def _parse_id(value: Any) -> Optional[Union[str, int]]:
    # Ids are matched exactly; an int id never equals a stored string id
    if isinstance(value, str) and value:
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def _parse_roles(roles: Any, role: Any) -> Optional[frozenset[str]]:
    # A present roles list is kept even when empty, and then admits nobody
    allowed: Optional[set[str]] = None
    if isinstance(roles, (list, tuple, set, frozenset)):
        allowed = {r for r in roles if isinstance(r, str) and r}
    elif isinstance(roles, str) and roles:
        allowed = {roles}
    if isinstance(role, str) and role:
        allowed = (allowed or set()) | {role}
    return frozenset(allowed) if allowed is not None else None


def parse_rule(raw: RuleInput) -> VisibilityRule:
    """Parse a rule from None, a JSON object, or an existing VisibilityRule."""
    return VisibilityRule.from_json(raw)
