# visibility/providers/__init__.py
"""
Visibility Profile Providers

Each provider reads a signed-in viewer's facts from one source and builds
a VisibilityProfile.
"""

from visibility.providers.base import ProfileProvider
from visibility.providers.database import DatabaseProfileProvider
from visibility.providers.rest import RestProfileProvider
from visibility.providers.static import StaticProfileProvider, ViewerFacts

__all__ = [
    "ProfileProvider",
    "DatabaseProfileProvider",
    "RestProfileProvider",
    "StaticProfileProvider",
    "ViewerFacts",
]
