"""Tests for the message endpoint."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from availarr.domain.entities import (
    Availability,
    AvailabilityStatus,
    ConnectionTestOutcome,
    DetectedEpisode,
    DetectedMovie,
    EnrichedSearchResult,
    MediaServerSettings,
    RequestOutcome,
    SearchOutcome,
    ServiceSettings,
)
from availarr.infrastructure.config import InMemoryConfigProvider
from availarr.interfaces.api.messages.router import router

_SERVER_URL = "http://jf.example.com:8096"


def _make_app(orchestrator: AsyncMock, provider: InMemoryConfigProvider) -> FastAPI:
    app = FastAPI()
    app.include_router(router, prefix="/api/v1")
    app.state.orchestrator = orchestrator
    app.state.config_provider = provider
    return app


@pytest.fixture()
def orchestrator() -> AsyncMock:
    return AsyncMock()


@pytest.fixture()
def provider() -> InMemoryConfigProvider:
    return InMemoryConfigProvider(
        ServiceSettings(
            media_server=MediaServerSettings(
                server_type="jellyfin", url=_SERVER_URL, api_key="k"
            )
        )
    )


@pytest.fixture()
def client(orchestrator: AsyncMock, provider: InMemoryConfigProvider) -> TestClient:
    return TestClient(_make_app(orchestrator, provider))


def _post(client: TestClient, type_: str, payload: dict | None = None) -> dict:
    resp = client.post(
        "/api/v1/messages", json={"type": type_, "payload": payload or {}}
    )
    assert resp.status_code == 200
    return resp.json()


class TestCheckMedia:
    def test_available(self, client: TestClient, orchestrator: AsyncMock) -> None:
        orchestrator.check_availability.return_value = Availability.available(
            item_id="abc",
            server_url=_SERVER_URL,
            item_url=f"{_SERVER_URL}/web/#/details?id=abc",
        )

        data = _post(
            client,
            "CHECK_MEDIA",
            {"title": "The Matrix", "mediaType": "movie", "year": 1999, "tmdbId": 603},
        )

        assert data == {
            "type": "CHECK_MEDIA_RESPONSE",
            "payload": {
                "status": "available",
                "serverType": "jellyfin",
                "itemId": "abc",
                "itemUrl": f"{_SERVER_URL}/web/#/details?id=abc",
            },
        }
        media = orchestrator.check_availability.await_args.args[0]
        assert media == DetectedMovie(title="The Matrix", year=1999, tmdb_id="603")

    def test_episode_payload(self, client: TestClient, orchestrator: AsyncMock) -> None:
        orchestrator.check_availability.return_value = Availability.unavailable()

        data = _post(
            client,
            "CHECK_MEDIA",
            {
                "title": "Dark",
                "mediaType": "episode",
                "seasonNumber": 2,
                "episodeNumber": 5,
            },
        )

        assert data["payload"]["status"] == "unavailable"
        media = orchestrator.check_availability.await_args.args[0]
        assert isinstance(media, DetectedEpisode)
        assert (media.season_number, media.episode_number) == (2, 5)

    def test_invalid_media_type(self, client: TestClient, orchestrator: AsyncMock) -> None:
        data = _post(client, "CHECK_MEDIA", {"title": "X", "mediaType": "person"})

        assert data["type"] == "ERROR"
        orchestrator.check_availability.assert_not_awaited()


class TestRequestMedia:
    def test_passes_provider_id(
        self, client: TestClient, orchestrator: AsyncMock
    ) -> None:
        orchestrator.submit_request.return_value = RequestOutcome(
            success=False, message="[https://seerr] CSRF", error_kind="csrf"
        )

        data = _post(
            client,
            "REQUEST_MEDIA",
            {"title": "The Matrix", "mediaType": "movie", "tmdbId": "603"},
        )

        assert data == {
            "type": "REQUEST_MEDIA_RESPONSE",
            "payload": {
                "success": False,
                "message": "[https://seerr] CSRF",
                "errorKind": "csrf",
            },
        }
        assert orchestrator.submit_request.await_args.kwargs["provider_id"] == "603"


class TestSearchMedia:
    def test_results_rendered(self, client: TestClient, orchestrator: AsyncMock) -> None:
        orchestrator.search_and_enrich.return_value = SearchOutcome(
            results=[
                EnrichedSearchResult(
                    id=603,
                    title="The Matrix",
                    media_type="movie",
                    status=AvailabilityStatus.AVAILABLE,
                    year=1999,
                    poster_url="https://image.tmdb.org/t/p/w185/m.jpg",
                    server_item_url=f"{_SERVER_URL}/web/#/details?id=abc",
                )
            ],
            server_type="jellyfin",
            request_service_url="https://seerr",
        )

        data = _post(client, "SEARCH_MEDIA", {"query": "matrix", "mediaType": "movie"})

        payload = data["payload"]
        assert payload["requestServiceEnabled"] is True
        assert "error" not in payload
        [row] = payload["results"]
        assert row["status"] == "available"
        assert row["mediaType"] == "movie"
        assert row["serverItemUrl"].endswith("id=abc")
        args = orchestrator.search_and_enrich.await_args
        assert args.args == ("matrix",)
        assert args.kwargs["media_type"] == "movie"


class TestConfigMessages:
    def test_get_config(self, client: TestClient) -> None:
        data = _post(client, "GET_CONFIG")
        assert data["payload"]["mediaServer"]["serverType"] == "jellyfin"
        assert data["payload"]["requestService"]["enabled"] is False

    def test_save_config_notifies(
        self, client: TestClient, provider: InMemoryConfigProvider
    ) -> None:
        listener = MagicMock()
        provider.add_listener(listener)

        data = _post(
            client,
            "SAVE_CONFIG",
            {
                "mediaServer": {
                    "serverType": "emby",
                    "url": "http://emby.lan:8096/",
                    "apiKey": "new",
                },
                "requestService": {"enabled": True, "url": "https://seerr"},
            },
        )

        assert data["payload"] == {"success": True}
        listener.assert_called_once()
        saved = provider.get()
        assert saved.media_server.url == "http://emby.lan:8096"
        assert saved.request_service.enabled is True


class TestConnectionMessage:
    def test_connection(self, client: TestClient, orchestrator: AsyncMock) -> None:
        orchestrator.test_connection.return_value = ConnectionTestOutcome(
            success=True, url="http://10.0.0.5:8096", is_local=True
        )

        data = _post(client, "TEST_CONNECTION", {"service": "media_server"})

        assert data["payload"] == {
            "success": True,
            "url": "http://10.0.0.5:8096",
            "isLocal": True,
        }


class TestErrors:
    def test_unknown_type(self, client: TestClient) -> None:
        data = _post(client, "FROBNICATE")
        assert data == {
            "type": "ERROR",
            "payload": {"message": "Unknown message type: FROBNICATE"},
        }

    def test_unexpected_exception(
        self, client: TestClient, orchestrator: AsyncMock
    ) -> None:
        orchestrator.test_connection.side_effect = RuntimeError("boom")

        data = _post(client, "TEST_CONNECTION", {"service": "request_service"})

        assert data == {"type": "ERROR", "payload": {"message": "boom"}}
