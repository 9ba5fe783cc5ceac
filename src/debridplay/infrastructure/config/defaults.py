"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "debridplay",
    "environment": "dev",
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "streaming": {
        "profile_id": "balanced",
        "custom_range": {
            "min_resolution": "any",
            "max_resolution": "any",
            "min_source_quality": "any",
            "max_source_quality": "any",
        },
        "allow_uncached": False,
        "auto_play": True,
        "duplicate_policy": "ignore",
        "max_concurrent_addons": 5,
        "addon_timeout_seconds": 30.0,
    },
}
