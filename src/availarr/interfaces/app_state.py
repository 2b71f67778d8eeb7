"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from starlette.datastructures import State

from availarr.infrastructure.config import AppConfig

if TYPE_CHECKING:
    from availarr.application.orchestrator import RequestOrchestrator
    from availarr.domain.ports import (
        ConfigProviderPort,
        EndpointResolverPort,
        MediaServerPort,
        RequestServicePort,
    )


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig
    config_provider: ConfigProviderPort

    # Infrastructure
    http_client: httpx.AsyncClient
    probe_client: httpx.AsyncClient

    # Domain Ports
    resolver: EndpointResolverPort
    media_server: MediaServerPort
    request_service: RequestServicePort

    # Application Services
    orchestrator: RequestOrchestrator
