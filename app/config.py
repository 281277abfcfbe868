# app/config.py
"""
Centralized configuration management with startup validation.

Defines REQUIRED vs OPTIONAL environment variables and provides
safe configuration loading with validation and logging.
"""
import logging
import os
import re
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

SERVICE_NAME = "picks-api"
SERVICE_VERSION = "0.1.0"

DEFAULT_MAX_REQUEST_SIZE_BYTES = 1_048_576  # 1MB
MIN_REQUEST_SIZE_BYTES = 1024  # 1KB minimum

# Profile source and staleness
PROFILE_PROVIDERS = ("database", "rest", "static")
DEFAULT_PROFILE_PROVIDER = "database"
DEFAULT_PROFILE_CACHE_TTL_SECONDS = 30
DEFAULT_PROFILE_REST_TIMEOUT = 10

DEFAULT_SESSION_DURATION_DAYS = 7

# Sensitive substrings that should never appear in logs
SENSITIVE_SUBSTRINGS = ("key", "token", "secret", "password", "credential", "auth")


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""

    pass


# =============================================================================
# Configuration Dataclass
# =============================================================================


@dataclass
class AppConfig:
    """Application configuration loaded from environment."""

    # Service info
    service_name: str = SERVICE_NAME
    service_version: str = SERVICE_VERSION
    environment: str = "development"

    # Security settings
    max_request_size_bytes: int = DEFAULT_MAX_REQUEST_SIZE_BYTES
    session_duration_days: int = DEFAULT_SESSION_DURATION_DAYS
    session_cookie_secure: bool = False

    # Visibility profile source
    profile_provider: str = DEFAULT_PROFILE_PROVIDER
    # 0 = re-fetch the profile on every request
    profile_cache_ttl_seconds: int = DEFAULT_PROFILE_CACHE_TTL_SECONDS
    profile_rest_url: Optional[str] = None
    profile_rest_timeout: int = DEFAULT_PROFILE_REST_TIMEOUT

    # Never logged; the snapshot reports presence only
    profile_rest_key: Optional[str] = field(default=None, repr=False)
    profile_rest_key_present: bool = False

    # Warnings collected during config load
    warnings: list = field(default_factory=list)


# =============================================================================
# Configuration Loading
# =============================================================================


def _parse_int_env(
    name: str, default: int, min_value: Optional[int] = None
) -> tuple[int, Optional[str]]:
    """
    Parse an integer environment variable with validation.

    Returns (value, warning_message).
    On invalid input, returns default with a warning.
    """
    raw = os.environ.get(name)
    if raw is None:
        return default, None

    try:
        value = int(raw)
    except ValueError:
        warning = f"{name}='{raw}' is not a valid integer; using default {default}"
        return default, warning

    if min_value is not None and value < min_value:
        warning = f"{name}={value} is below minimum {min_value}; using default {default}"
        return default, warning

    return value, None


def _parse_bool_env(name: str, default: bool = False) -> bool:
    """Parse a boolean environment variable."""
    raw = os.environ.get(name, "").lower()
    if raw in ("true", "1", "yes", "on"):
        return True
    if raw in ("false", "0", "no", "off"):
        return False
    return default


def load_config(fail_fast: bool = True) -> AppConfig:
    """
    Load and validate application configuration from environment.

    Args:
        fail_fast: If True, raise ConfigurationError on critical issues.
                   If False, collect warnings and fall back to safe defaults.

    Returns:
        AppConfig instance with validated configuration.

    Raises:
        ConfigurationError: If required configuration is missing/invalid
                           and fail_fast is True.
    """
    warnings = []

    environment = os.environ.get("APP_ENVIRONMENT", "development")

    max_request_size, size_warning = _parse_int_env(
        "MAX_REQUEST_SIZE_BYTES",
        DEFAULT_MAX_REQUEST_SIZE_BYTES,
        min_value=MIN_REQUEST_SIZE_BYTES,
    )
    if size_warning:
        warnings.append(size_warning)

    session_days, session_warning = _parse_int_env(
        "SESSION_DURATION_DAYS", DEFAULT_SESSION_DURATION_DAYS, min_value=1
    )
    if session_warning:
        warnings.append(session_warning)

    cookie_secure = _parse_bool_env("SESSION_COOKIE_SECURE", default=environment == "production")

    # Profile provider selection
    profile_provider = os.environ.get("PROFILE_PROVIDER", DEFAULT_PROFILE_PROVIDER).strip().lower()
    if profile_provider not in PROFILE_PROVIDERS:
        warnings.append(
            f"PROFILE_PROVIDER='{profile_provider}' is not one of {', '.join(PROFILE_PROVIDERS)}; "
            f"using default {DEFAULT_PROFILE_PROVIDER}"
        )
        profile_provider = DEFAULT_PROFILE_PROVIDER

    cache_ttl, ttl_warning = _parse_int_env(
        "PROFILE_CACHE_TTL_SECONDS", DEFAULT_PROFILE_CACHE_TTL_SECONDS, min_value=0
    )
    if ttl_warning:
        warnings.append(ttl_warning)

    rest_timeout, timeout_warning = _parse_int_env(
        "PROFILE_REST_TIMEOUT", DEFAULT_PROFILE_REST_TIMEOUT, min_value=1
    )
    if timeout_warning:
        warnings.append(timeout_warning)

    rest_url = os.environ.get("PROFILE_REST_URL") or None
    rest_key = os.environ.get("PROFILE_REST_KEY")
    rest_key_present = bool(rest_key and len(rest_key) > 0)

    if profile_provider == "rest" and not rest_url:
        message = "PROFILE_PROVIDER is 'rest' but PROFILE_REST_URL is not set"
        if fail_fast:
            raise ConfigurationError(message)
        warnings.append(f"{message}; using default {DEFAULT_PROFILE_PROVIDER}")
        profile_provider = DEFAULT_PROFILE_PROVIDER

    if profile_provider == "rest" and not rest_key_present:
        warnings.append(
            "PROFILE_PROVIDER is 'rest' but PROFILE_REST_KEY is not set; "
            "requests will be sent without an API key"
        )

    for warning in warnings:
        logger.warning(f"[CONFIG] {warning}")

    return AppConfig(
        environment=environment,
        max_request_size_bytes=max_request_size,
        session_duration_days=session_days,
        session_cookie_secure=cookie_secure,
        profile_provider=profile_provider,
        profile_cache_ttl_seconds=cache_ttl,
        profile_rest_url=rest_url,
        profile_rest_timeout=rest_timeout,
        profile_rest_key=rest_key or None,
        profile_rest_key_present=rest_key_present,
        warnings=warnings,
    )


def log_config_snapshot(config: AppConfig) -> str:
    """
    Generate and log a safe configuration snapshot.

    Returns the snapshot string for testing purposes.
    Never logs actual secret values - only boolean presence flags.
    """
    snapshot = (
        f"[STARTUP] service={config.service_name} "
        f"version={config.service_version} "
        f"environment={config.environment} "
        f"max_request_size_bytes={config.max_request_size_bytes} "
        f"session_cookie_secure={config.session_cookie_secure} "
        f"profile_provider={config.profile_provider} "
        f"profile_cache_ttl_seconds={config.profile_cache_ttl_seconds} "
        f"profile_rest_key_present={config.profile_rest_key_present}"
    )
    logger.info(snapshot)
    return snapshot


def validate_config_snapshot_safety(snapshot: str) -> bool:
    """
    Validate that a config snapshot doesn't contain sensitive values.

    Returns True if safe, False if potentially unsafe.
    """
    snapshot_lower = snapshot.lower()

    # "key_present=true" is fine, "key=sk-..." is not
    for sensitive in SENSITIVE_SUBSTRINGS:
        pattern = rf"{sensitive}=(?!true|false)"
        if re.search(pattern, snapshot_lower):
            return False

    return True
