# visibility/device.py
"""
Device Class Helper.

Classifies a viewer as mobile or desktop from an injected viewport width
(or, when no width is known, the request's user agent). Nothing here reads
global state, so rendering code passes the measurement in.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Optional, Union


class DeviceClass(str, Enum):
    """Viewport classification used by device-gated rules."""
    MOBILE = "mobile"
    DESKTOP = "desktop"


# Widths at or below this many logical pixels are mobile
MOBILE_MAX_WIDTH = 768

_MOBILE_UA_PATTERN = re.compile(r"Mobile|Android|iPhone|iPad")


def parse_device_class(value: object) -> Optional[DeviceClass]:
    """
    Parse a device class from a raw value.

    Returns None for anything that is not "mobile" or "desktop"
    (case-insensitive).
    """
    if isinstance(value, DeviceClass):
        return value
    if not isinstance(value, str):
        return None
    try:
        return DeviceClass(value.strip().lower())
    except ValueError:
        return None


def classify_device(width: Union[int, float]) -> DeviceClass:
    """Classify a viewport width: mobile iff width <= 768."""
    if width <= MOBILE_MAX_WIDTH:
        return DeviceClass.MOBILE
    return DeviceClass.DESKTOP


def classify_user_agent(user_agent: Optional[str]) -> DeviceClass:
    """Classify a user agent string (mobile browsers identify themselves)."""
    if user_agent and _MOBILE_UA_PATTERN.search(user_agent):
        return DeviceClass.MOBILE
    return DeviceClass.DESKTOP


def resolve_device_class(
    width: Optional[Union[int, float]] = None,
    user_agent: Optional[str] = None,
) -> DeviceClass:
    """
    Resolve the device class for a request.

    Precedence:
    1. A valid viewport width (non-negative number)
    2. The user agent
    3. DESKTOP when nothing is known
    """
    if isinstance(width, (int, float)) and not isinstance(width, bool) and width >= 0:
        return classify_device(width)
    if user_agent:
        return classify_user_agent(user_agent)
    return DeviceClass.DESKTOP
