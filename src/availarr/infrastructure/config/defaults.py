"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "availarr",
    "environment": "dev",
    "http": {
        "timeout_seconds": 10.0,
        "user_agent": "Availarr/0.1.0",
    },
    "endpoints": {
        "probe_timeout_seconds": 3.0,
        "cache_ttl_seconds": 300,
    },
    "search": {
        "server_resolve_timeout_seconds": 4.0,
        "enrichment_timeout_seconds": 5.0,
        "max_candidates": 5,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "media_server": {
        "server_type": "emby",
        "url": "",
        "local_url": "",
        "api_key": "",
    },
    "request_service": {
        "enabled": False,
        "url": "",
        "local_url": "",
        "api_key": "",
    },
}
