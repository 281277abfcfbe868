# visibility/evaluator.py
"""
Visibility Rule Evaluator.

The single implementation every gate and renderer calls. Pure and total:
no I/O, no caching, no logging, and no exceptions for any input.

Checklist (first failing clause wins):
1. requiresAuth / loggedIn
2. minTokens (strict <, so minTokens 0 never hides)
3. hasUsedAnalyzer
4. joinedContest
5. hasJoinedAnyContest
6. hasUsedAnyAnalyzer
7. device
8. roles
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from visibility.profile import VisibilityProfile
from visibility.rules import RuleInput, parse_rule


class HiddenReason(str, Enum):
    """Why a rule hid content from a viewer."""
    AUTHENTICATION_REQUIRED = "authentication_required"
    INSUFFICIENT_TOKENS = "insufficient_tokens"
    ANALYZER_USAGE_REQUIRED = "analyzer_usage_required"
    CONTEST_PARTICIPATION_REQUIRED = "contest_participation_required"
    ANY_CONTEST_PARTICIPATION_REQUIRED = "any_contest_participation_required"
    ANY_ANALYZER_USAGE_REQUIRED = "any_analyzer_usage_required"
    DEVICE_MISMATCH = "device_mismatch"
    ROLE_NOT_ALLOWED = "role_not_allowed"


@dataclass(frozen=True)
class VisibilityDecision:
    """Outcome of evaluating a rule: visible, or hidden with a reason."""
    visible: bool
    reason: Optional[HiddenReason] = None

    def to_dict(self) -> dict:
        return {
            "visible": self.visible,
            "reason": self.reason.value if self.reason else None,
        }


VISIBLE = VisibilityDecision(visible=True)


def _hidden(reason: HiddenReason) -> VisibilityDecision:
    return VisibilityDecision(visible=False, reason=reason)


def explain_visibility(rule: RuleInput, profile: VisibilityProfile) -> VisibilityDecision:
    """
    Evaluate a rule against a profile and report the first failing clause.

    Args:
        rule: None, a stored JSON rule, or a parsed VisibilityRule
        profile: Fully populated viewer profile

    Returns:
        VisibilityDecision (visible=True with no reason when shown)
    """
    parsed = parse_rule(rule)
    if parsed.is_empty:
        return VISIBLE

    if parsed.requires_auth is True and not profile.is_authenticated:
        return _hidden(HiddenReason.AUTHENTICATION_REQUIRED)

    if parsed.min_tokens is not None and profile.token_balance < parsed.min_tokens:
        return _hidden(HiddenReason.INSUFFICIENT_TOKENS)

    if (
        parsed.has_used_analyzer is not None
        and parsed.has_used_analyzer not in profile.used_analyzer_ids
    ):
        return _hidden(HiddenReason.ANALYZER_USAGE_REQUIRED)

    if (
        parsed.joined_contest is not None
        and parsed.joined_contest not in profile.joined_contest_ids
    ):
        return _hidden(HiddenReason.CONTEST_PARTICIPATION_REQUIRED)

    if parsed.has_joined_any_contest is True and not profile.joined_contest_ids:
        return _hidden(HiddenReason.ANY_CONTEST_PARTICIPATION_REQUIRED)

    if parsed.has_used_any_analyzer is True and not profile.used_analyzer_ids:
        return _hidden(HiddenReason.ANY_ANALYZER_USAGE_REQUIRED)

    if parsed.device is not None and parsed.device != profile.device_class:
        return _hidden(HiddenReason.DEVICE_MISMATCH)

    if parsed.roles is not None and profile.role not in parsed.roles:
        return _hidden(HiddenReason.ROLE_NOT_ALLOWED)

    return VISIBLE


def is_visible(rule: RuleInput, profile: VisibilityProfile) -> bool:
    """True iff every condition present in the rule passes for the profile."""
    return explain_visibility(rule, profile).visible
