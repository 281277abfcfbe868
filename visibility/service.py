# visibility/service.py
"""
Profile Service - the one place visibility profiles are built.

Routes and renderers should use this service rather than calling
providers directly.

Features:
- Provider selection from configuration
- Per-user cache with a TTL (0 disables caching)
- Explicit invalidation hooks for when a viewer's facts change
- Fail-closed fallback when a provider cannot answer
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from threading import Lock
from typing import Optional

from visibility.device import DeviceClass
from visibility.profile import VisibilityProfile, anonymous_profile
from visibility.providers.base import ProfileProvider
from visibility.providers.database import DatabaseProfileProvider

_logger = logging.getLogger(__name__)

# Source label on profiles substituted after a failed fetch
FAIL_CLOSED_SOURCE = "fail-closed"


@dataclass
class CacheEntry:
    """Cached profile with expiration."""

    profile: VisibilityProfile
    expires_at: datetime

    def is_expired(self) -> bool:
        """Check if cache entry has expired."""
        return datetime.utcnow() >= self.expires_at


class ProfileService:
    """
    Builds and caches visibility profiles.

    Anonymous viewers never reach a provider. Signed-in viewers are fetched
    from the provider and cached per user id; the device class is attached
    per request and never cached.
    """

    DEFAULT_TTL_SECONDS = 30

    def __init__(
        self,
        provider: Optional[ProfileProvider] = None,
        cache_ttl_seconds: int = DEFAULT_TTL_SECONDS,
    ):
        """
        Args:
            provider: Profile source (default: the application database)
            cache_ttl_seconds: How long a fetched profile stays fresh
        """
        self._provider = provider or DatabaseProfileProvider()
        self._cache: dict[str, CacheEntry] = {}
        self._cache_ttl = timedelta(seconds=max(0, cache_ttl_seconds))
        self._lock = Lock()

    @property
    def provider(self) -> ProfileProvider:
        return self._provider

    @property
    def caching_enabled(self) -> bool:
        return self._cache_ttl > timedelta(0)

    def get_profile(
        self,
        user_id: Optional[str],
        device_class: DeviceClass = DeviceClass.DESKTOP,
        force_refresh: bool = False,
    ) -> VisibilityProfile:
        """
        Get the visibility profile for a viewer.

        Args:
            user_id: Signed-in user id, or None for anonymous viewers
            device_class: Device classification of the current request
            force_refresh: If True, bypass the cache and fetch fresh

        Returns:
            VisibilityProfile (the fail-closed profile if the fetch failed)
        """
        if not user_id:
            return anonymous_profile(device_class=device_class)

        if not force_refresh:
            cached = self._get_cached(user_id)
            if cached is not None:
                return cached.with_device(device_class)

        profile = self._fetch(user_id)
        if profile is None:
            return anonymous_profile(source=FAIL_CLOSED_SOURCE, device_class=device_class)

        self._set_cached(user_id, profile)
        return profile.with_device(device_class)

    def _fetch(self, user_id: str) -> Optional[VisibilityProfile]:
        provider = self._provider
        if not provider.is_available():
            _logger.warning(
                f"Profile provider {provider.source_name} unavailable; "
                f"serving fail-closed profile for user {user_id}"
            )
            return None

        try:
            profile = provider.fetch(user_id)
        except Exception:
            _logger.exception(f"Profile provider {provider.source_name} raised for user {user_id}")
            return None

        if profile is None:
            _logger.warning(
                f"Profile provider {provider.source_name} returned no data; "
                f"serving fail-closed profile for user {user_id}"
            )
        return profile

    def _get_cached(self, user_id: str) -> Optional[VisibilityProfile]:
        """Get cached profile if available and not expired."""
        with self._lock:
            entry = self._cache.get(user_id)
            if entry is not None and not entry.is_expired():
                return entry.profile
            return None

    def _set_cached(self, user_id: str, profile: VisibilityProfile) -> None:
        if not self.caching_enabled:
            return
        with self._lock:
            # Drop every expired entry, not only this user's
            for key in [k for k, e in self._cache.items() if e.is_expired()]:
                del self._cache[key]
            self._cache[user_id] = CacheEntry(
                profile=profile,
                expires_at=datetime.utcnow() + self._cache_ttl,
            )

    def invalidate(self, user_id: Optional[str] = None) -> None:
        """
        Drop cached profiles.

        Call after anything that changes a viewer's facts (token spend,
        contest entry, completed analyzer run, sign-out).

        Args:
            user_id: Specific user to drop, or None for all
        """
        with self._lock:
            if user_id is None:
                self._cache.clear()
            else:
                self._cache.pop(user_id, None)

    def get_cache_status(self) -> dict:
        """Get cache status for monitoring."""
        with self._lock:
            return {
                user_id: {
                    "expires_at": entry.expires_at.isoformat(),
                    "is_expired": entry.is_expired(),
                    "source": entry.profile.source,
                }
                for user_id, entry in self._cache.items()
            }


def build_provider(config) -> ProfileProvider:
    """Create the provider named by an AppConfig."""
    from visibility.providers.rest import RestProfileProvider
    from visibility.providers.static import StaticProfileProvider

    if config.profile_provider == "rest":
        return RestProfileProvider(
            base_url=config.profile_rest_url or "",
            api_key=config.profile_rest_key or "",
            timeout=float(config.profile_rest_timeout),
        )
    if config.profile_provider == "static":
        return StaticProfileProvider()
    return DatabaseProfileProvider()


# Singleton instance for app-wide use
_service_instance: Optional[ProfileService] = None
_service_lock = Lock()


def get_profile_service() -> ProfileService:
    """Get the singleton profile service, configured from the environment."""
    global _service_instance
    with _service_lock:
        if _service_instance is None:
            from app.config import load_config

            config = load_config(fail_fast=False)
            _service_instance = ProfileService(
                provider=build_provider(config),
                cache_ttl_seconds=config.profile_cache_ttl_seconds,
            )
        return _service_instance


def set_profile_service(service: Optional[ProfileService]) -> None:
    """Replace the singleton (None resets it to be rebuilt from config)."""
    global _service_instance
    with _service_lock:
        _service_instance = service


def reset_profile_service() -> None:
    """Reset the singleton so the next call rebuilds it from config."""
    set_profile_service(None)


def get_profile(
    user_id: Optional[str],
    device_class: DeviceClass = DeviceClass.DESKTOP,
    force_refresh: bool = False,
) -> VisibilityProfile:
    """
    Convenience function to get a viewer's profile.

    This is the primary entry point for profile data.
    """
    return get_profile_service().get_profile(user_id, device_class, force_refresh)
