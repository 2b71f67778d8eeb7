"""Shared test fixtures for the Availarr test suite."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from availarr.application.orchestrator import RequestOrchestrator
from availarr.domain.entities import (
    MediaServerSettings,
    RequestServiceSettings,
    ServiceEndpointPair,
    ServiceSettings,
)
from availarr.infrastructure.config import InMemoryConfigProvider

SERVER_URL = "http://emby.example.com:8096"
SEERR_URL = "https://requests.example.com"

# ---------------------------------------------------------------------------
# Settings fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def media_server_settings() -> MediaServerSettings:
    return MediaServerSettings(
        server_type="emby", url=SERVER_URL, api_key="server-key"
    )


@pytest.fixture()
def request_service_settings() -> RequestServiceSettings:
    return RequestServiceSettings(enabled=True, url=SEERR_URL, api_key="seerr-key")


@pytest.fixture()
def service_settings(
    media_server_settings: MediaServerSettings,
    request_service_settings: RequestServiceSettings,
) -> ServiceSettings:
    return ServiceSettings(
        media_server=media_server_settings,
        request_service=request_service_settings,
    )


@pytest.fixture()
def config_provider(service_settings: ServiceSettings) -> InMemoryConfigProvider:
    return InMemoryConfigProvider(service_settings)


# ---------------------------------------------------------------------------
# Port mocks
# ---------------------------------------------------------------------------


@pytest.fixture()
def resolver() -> MagicMock:
    """Resolver that always answers with the public URL."""

    async def _resolve(pair: ServiceEndpointPair) -> str:
        return pair.public_url

    mock = MagicMock()
    mock.resolve = AsyncMock(side_effect=_resolve)
    mock.probe = AsyncMock(return_value=False)
    mock.is_using_local.return_value = False
    return mock


@pytest.fixture()
def media_server() -> AsyncMock:
    mock = AsyncMock()
    mock.search.return_value = []
    mock.search_by_provider_id.return_value = []
    mock.get_seasons.return_value = []
    mock.get_episodes.return_value = []
    mock.ping.return_value = True
    return mock


@pytest.fixture()
def request_service() -> AsyncMock:
    mock = AsyncMock()
    mock.search.return_value = []
    mock.ping.return_value = True
    return mock


@pytest.fixture()
def orchestrator(
    config_provider: InMemoryConfigProvider,
    resolver: MagicMock,
    media_server: AsyncMock,
    request_service: AsyncMock,
) -> RequestOrchestrator:
    return RequestOrchestrator(
        config=config_provider,
        resolver=resolver,
        media_server=media_server,
        request_service=request_service,
    )
