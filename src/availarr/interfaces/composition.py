"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from availarr.application.matching import MatchingEngine
from availarr.application.orchestrator import RequestOrchestrator
from availarr.infrastructure.config import InMemoryConfigProvider
from availarr.infrastructure.endpoints.resolver import EndpointResolver
from availarr.infrastructure.media_server.client import HttpxMediaServerClient
from availarr.infrastructure.seerr.client import HttpxSeerrClient
from availarr.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan Hook: Initialize and cleanup all resources (DI Composition Root).

    Order matters:
        1. HTTP clients (API client + dedicated probe client)
        2. Endpoint resolver (uses the probe client)
        3. Config provider (invalidates the resolver cache on save)
        4. Upstream clients (use the API client)
        5. Orchestrator
    """
    state = cast(AppState, app.state)
    config = state.config

    # 1) HTTP clients. The API client keeps cookies for the CSRF handshake;
    #    the probe client never follows redirects and carries no credentials.
    state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(config.http_timeout_seconds),
        headers={"User-Agent": config.http_user_agent},
        follow_redirects=True,
    )
    state.probe_client = httpx.AsyncClient(
        timeout=httpx.Timeout(config.probe_timeout_seconds),
        headers={"User-Agent": config.http_user_agent},
        follow_redirects=False,
    )
    log.info(
        "http_client_initialized",
        timeout_seconds=config.http_timeout_seconds,
        probe_timeout_seconds=config.probe_timeout_seconds,
    )

    # 2) Endpoint resolver
    resolver = EndpointResolver(
        http_client=state.probe_client,
        probe_timeout=config.probe_timeout_seconds,
        ttl_seconds=config.endpoint_cache_ttl_seconds,
    )
    state.resolver = resolver
    log.info("endpoint_resolver_initialized", ttl_seconds=config.endpoint_cache_ttl_seconds)

    # 3) Config provider
    state.config_provider = InMemoryConfigProvider(
        config.to_service_settings(),
        listeners=[lambda _settings: resolver.invalidate()],
    )

    # 4) Upstream clients
    state.media_server = HttpxMediaServerClient(http_client=state.http_client)
    state.request_service = HttpxSeerrClient(http_client=state.http_client)

    # 5) Orchestrator
    state.orchestrator = RequestOrchestrator(
        config=state.config_provider,
        resolver=resolver,
        media_server=state.media_server,
        request_service=state.request_service,
        matcher=MatchingEngine(max_candidates=config.max_candidates),
        server_resolve_timeout=config.server_resolve_timeout_seconds,
        enrichment_timeout=config.enrichment_timeout_seconds,
        max_results=config.max_candidates,
    )

    log.info("app_startup_complete")

    try:
        yield
    finally:
        await state.http_client.aclose()
        await state.probe_client.aclose()
        log.info("http_client_closed")

        log.info("app_shutdown_complete")
