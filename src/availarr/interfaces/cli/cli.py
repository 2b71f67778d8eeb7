from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog
import uvicorn

from availarr.infrastructure.config import load_config
from availarr.infrastructure.logging.setup import configure_logging
from availarr.interfaces.app import create_app

log = structlog.get_logger(__name__)


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="availarr")

    # Server options
    parser.add_argument(
        "--host",
        default=None,
        help="Bind host (overrides HOST env).",
    )
    parser.add_argument(
        "--port",
        default=None,
        type=int,
        help="Bind port (overrides PORT env).",
    )

    # Config wiring flags (no business logic)
    parser.add_argument(
        "--config",
        default=None,
        help="Path to YAML config file.",
    )
    parser.add_argument(
        "--dotenv",
        default=None,
        help="Path to .env file.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override log level.",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        choices=["json", "console"],
        help="Override log format.",
    )

    # Service endpoints; API keys come from env or YAML only
    parser.add_argument(
        "--server-type",
        default=None,
        choices=["emby", "jellyfin"],
        help="Media server family.",
    )
    parser.add_argument(
        "--media-server-url",
        default=None,
        help="Public media server URL.",
    )
    parser.add_argument(
        "--media-server-local-url",
        default=None,
        help="LAN media server URL, preferred while reachable.",
    )
    parser.add_argument(
        "--request-service-url",
        default=None,
        help="Public Jellyseerr/Overseerr URL.",
    )
    parser.add_argument(
        "--request-service-local-url",
        default=None,
        help="LAN Jellyseerr/Overseerr URL, preferred while reachable.",
    )
    parser.add_argument(
        "--disable-requests",
        action="store_true",
        help="Turn off the request service regardless of config.",
    )

    # Endpoint resolution tunables
    parser.add_argument(
        "--probe-timeout",
        default=None,
        type=float,
        help="Seconds to wait for a LAN reachability probe.",
    )
    parser.add_argument(
        "--endpoint-cache-ttl",
        default=None,
        type=float,
        help="Seconds a LAN/public decision is reused.",
    )

    return parser.parse_args(argv)


# argparse dest -> flat config key understood by load_config.
_FLAG_KEYS: dict[str, str] = {
    "log_level": "log_level",
    "log_format": "log_format",
    "server_type": "media_server_type",
    "media_server_url": "media_server_url",
    "media_server_local_url": "media_server_local_url",
    "request_service_url": "request_service_url",
    "request_service_local_url": "request_service_local_url",
    "probe_timeout": "probe_timeout_seconds",
    "endpoint_cache_ttl": "endpoint_cache_ttl_seconds",
}


def build_cli_overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for dest, key in _FLAG_KEYS.items():
        value = getattr(args, dest)
        if value is not None:
            overrides[key] = value
    if args.disable_requests:
        overrides["request_service_enabled"] = False
    return overrides


def start(argv: Iterable[str] | None = None) -> None:
    """Process entrypoint: load config once, then serve the app with it."""
    if argv is None:
        argv = sys.argv[1:]

    args = _parse_args(argv)

    host = args.host or os.getenv("HOST", "127.0.0.1")
    port = int(args.port or os.getenv("PORT", "7979"))

    config = load_config(
        config_path=Path(args.config) if args.config else None,
        dotenv_path=Path(args.dotenv) if args.dotenv else None,
        cli_overrides=build_cli_overrides(args),
    )

    log_config = configure_logging(config)
    log.info("server_starting", host=host, port=port, environment=config.environment)
    services = config.to_service_settings()
    log.info(
        "services_configured",
        server_type=services.media_server.server_type,
        media_server=services.media_server.configured,
        media_server_lan=bool(services.media_server.local_url),
        request_service=services.request_service.enabled,
        request_service_lan=bool(services.request_service.local_url),
    )
    if not services.media_server.configured:
        log.warning("media_server_unconfigured")

    uvicorn.run(
        create_app(config),
        host=host,
        port=port,
        log_config=log_config,
    )


if __name__ == "__main__":
    raise SystemExit(start())
