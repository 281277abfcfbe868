# visibility/tests/test_device.py
"""Tests for device classification."""

from __future__ import annotations

import pytest

from visibility.device import (
    MOBILE_MAX_WIDTH,
    DeviceClass,
    classify_device,
    classify_user_agent,
    parse_device_class,
    resolve_device_class,
)

IPHONE_UA = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 Mobile/15E148"
ANDROID_UA = "Mozilla/5.0 (Linux; Android 14; Pixel 8) AppleWebKit/537.36 Chrome/120.0 Mobile Safari/537.36"
DESKTOP_UA = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 Chrome/120.0 Safari/537.36"


class TestClassifyDevice:
    """Width breakpoint."""

    def test_breakpoint_is_mobile(self):
        """768 itself is still mobile."""
        assert classify_device(MOBILE_MAX_WIDTH) == DeviceClass.MOBILE

    def test_one_past_breakpoint_is_desktop(self):
        assert classify_device(769) == DeviceClass.DESKTOP

    @pytest.mark.parametrize("width", [0, 320, 414, 767])
    def test_small_widths_mobile(self, width):
        assert classify_device(width) == DeviceClass.MOBILE

    @pytest.mark.parametrize("width", [1024, 1440, 2560])
    def test_large_widths_desktop(self, width):
        assert classify_device(width) == DeviceClass.DESKTOP


class TestClassifyUserAgent:

    @pytest.mark.parametrize("ua", [IPHONE_UA, ANDROID_UA, "Mozilla/5.0 (iPad; CPU OS 17_0)"])
    def test_mobile_agents(self, ua):
        assert classify_user_agent(ua) == DeviceClass.MOBILE

    def test_desktop_agent(self):
        assert classify_user_agent(DESKTOP_UA) == DeviceClass.DESKTOP

    def test_missing_agent(self):
        assert classify_user_agent(None) == DeviceClass.DESKTOP


class TestResolveDeviceClass:
    """Width first, then user agent, then desktop."""

    def test_width_wins_over_user_agent(self):
        """A wide window on a phone UA is desktop."""
        assert resolve_device_class(1200, IPHONE_UA) == DeviceClass.DESKTOP
        assert resolve_device_class(400, DESKTOP_UA) == DeviceClass.MOBILE

    def test_user_agent_when_no_width(self):
        assert resolve_device_class(None, IPHONE_UA) == DeviceClass.MOBILE

    def test_invalid_width_falls_back(self):
        """Negative or boolean widths are not measurements."""
        assert resolve_device_class(-1, IPHONE_UA) == DeviceClass.MOBILE
        assert resolve_device_class(True, None) == DeviceClass.DESKTOP

    def test_nothing_known_is_desktop(self):
        assert resolve_device_class() == DeviceClass.DESKTOP


class TestParseDeviceClass:

    def test_values(self):
        assert parse_device_class("mobile") == DeviceClass.MOBILE
        assert parse_device_class(" DESKTOP ") == DeviceClass.DESKTOP
        assert parse_device_class(DeviceClass.MOBILE) == DeviceClass.MOBILE

    def test_invalid(self):
        assert parse_device_class("tablet") is None
        assert parse_device_class(1) is None
        assert parse_device_class(None) is None
