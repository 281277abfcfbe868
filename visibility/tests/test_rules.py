# visibility/tests/test_rules.py
"""Tests for rule parsing and serialization."""

from __future__ import annotations

import math

from visibility.device import DeviceClass
from visibility.rules import EMPTY_RULE, VisibilityRule, parse_rule


class TestParseRule:
    """VisibilityRule.from_json / parse_rule."""

    def test_none_is_empty(self):
        assert parse_rule(None) is EMPTY_RULE
        assert parse_rule(None).is_empty

    def test_non_object_is_empty(self):
        """Lists, strings and numbers parse to the empty rule."""
        for raw in ([1, 2], "requiresAuth", 3, 2.5):
            assert parse_rule(raw).is_empty

    def test_full_rule(self):
        """Every known key is read."""
        rule = parse_rule({
            "requiresAuth": True,
            "minTokens": 25,
            "hasUsedAnalyzer": "nfl-v1",
            "hasUsedAnyAnalyzer": True,
            "joinedContest": "week-3",
            "hasJoinedAnyContest": True,
            "device": "mobile",
            "roles": ["user"],
        })
        assert rule.requires_auth is True
        assert rule.min_tokens == 25.0
        assert rule.has_used_analyzer == "nfl-v1"
        assert rule.has_used_any_analyzer is True
        assert rule.joined_contest == "week-3"
        assert rule.has_joined_any_contest is True
        assert rule.device == DeviceClass.MOBILE
        assert rule.roles == frozenset({"user"})
        assert not rule.is_empty

    def test_parsed_rule_passes_through(self):
        rule = VisibilityRule(requires_auth=True)
        assert parse_rule(rule) is rule

    def test_logged_in_alias(self):
        """loggedIn fills requiresAuth."""
        assert parse_rule({"loggedIn": True}).requires_auth is True

    def test_requires_auth_wins_over_alias(self):
        rule = parse_rule({"requiresAuth": False, "loggedIn": True})
        assert rule.requires_auth is False

    def test_string_flags_ignored(self):
        """"true" is not a boolean."""
        assert parse_rule({"requiresAuth": "true"}).requires_auth is None
        assert parse_rule({"hasUsedAnyAnalyzer": 1}).has_used_any_analyzer is None

    def test_min_tokens_types(self):
        """Only real numbers are thresholds."""
        assert parse_rule({"minTokens": "5"}).min_tokens is None
        assert parse_rule({"minTokens": False}).min_tokens is None
        assert parse_rule({"minTokens": math.nan}).min_tokens is None
        assert parse_rule({"minTokens": 7.5}).min_tokens == 7.5
        assert parse_rule({"minTokens": math.inf}).min_tokens is None
        assert parse_rule({"minTokens": -math.inf}).min_tokens is None

    def test_large_integer_threshold_kept_exact(self):
        huge = 10 ** 400
        rule = parse_rule({"minTokens": huge})
        assert rule.min_tokens == huge
        assert rule.to_json() == {"minTokens": huge}

    def test_ids_passed_through_unchanged(self):
        assert parse_rule({"hasUsedAnalyzer": "  nfl-v1 "}).has_used_analyzer == "  nfl-v1 "
        assert parse_rule({"joinedContest": 12}).joined_contest == 12
        assert parse_rule({"joinedContest": "   "}).joined_contest == "   "
        assert parse_rule({"joinedContest": ""}).joined_contest is None

    def test_device_case_insensitive(self):
        assert parse_rule({"device": "Mobile"}).device == DeviceClass.MOBILE
        assert parse_rule({"device": "tablet"}).device is None

    def test_role_and_roles_merge(self):
        rule = parse_rule({"roles": ["admin"], "role": "user"})
        assert rule.roles == frozenset({"admin", "user"})

    def test_empty_roles_is_kept(self):
        assert parse_rule({"roles": []}).roles == frozenset()
        assert parse_rule({"roles": []}).to_json() == {"roles": []}

    def test_missing_roles_is_absent(self):
        assert parse_rule({"roles": "", "role": None}).roles is None


class TestToJson:
    """VisibilityRule.to_json."""

    def test_only_present_conditions(self):
        rule = parse_rule({"requiresAuth": True, "junk": 1})
        assert rule.to_json() == {"requiresAuth": True}

    def test_alias_normalized(self):
        assert parse_rule({"loggedIn": True}).to_json() == {"requiresAuth": True}

    def test_integer_thresholds_stay_integers(self):
        assert parse_rule({"minTokens": 10}).to_json() == {"minTokens": 10}
        assert parse_rule({"minTokens": 2.5}).to_json() == {"minTokens": 2.5}

    def test_device_and_roles_serialized(self):
        rule = parse_rule({"device": "DESKTOP", "roles": ["b", "a"]})
        assert rule.to_json() == {"device": "desktop", "roles": ["a", "b"]}

    def test_empty_rule(self):
        assert EMPTY_RULE.to_json() == {}
