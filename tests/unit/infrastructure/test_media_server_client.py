"""Tests for HttpxMediaServerClient (Emby/Jellyfin adapter)."""

from __future__ import annotations

import httpx
import pytest
import respx

from availarr.domain.entities import MediaServerSettings
from availarr.domain.errors import ConfigurationError, NetworkError, RemoteRejectionError
from availarr.infrastructure.media_server.client import (
    HttpxMediaServerClient,
    build_api_headers,
    provider_id_params,
)

_BASE = "http://media.example.com:8096"

_EMBY = MediaServerSettings(server_type="emby", url=_BASE, api_key="emby-key")
_JELLYFIN = MediaServerSettings(server_type="jellyfin", url=_BASE, api_key="jf-key")

_ITEMS_RESPONSE = {
    "Items": [
        {
            "Id": "a1b2",
            "Name": "The Matrix",
            "Type": "Movie",
            "ServerId": "srv1",
            "ProductionYear": 1999,
            "ProviderIds": {"Tmdb": "603", "Imdb": "tt0133093"},
        }
    ],
    "TotalRecordCount": 1,
}


@pytest.fixture()
def client() -> HttpxMediaServerClient:
    return HttpxMediaServerClient(http_client=httpx.AsyncClient())


class TestHeaders:
    def test_emby_token_header(self) -> None:
        headers = build_api_headers(_EMBY)
        assert headers["X-Emby-Token"] == "emby-key"
        assert "Authorization" not in headers

    def test_jellyfin_authorization_header(self) -> None:
        headers = build_api_headers(_JELLYFIN)
        assert headers["Authorization"] == 'MediaBrowser Token="jf-key"'

    def test_provider_params_differ_by_family(self) -> None:
        assert provider_id_params(_EMBY, "603", "Tmdb") == {
            "AnyProviderIdEquals": "Tmdb.603"
        }
        assert provider_id_params(_JELLYFIN, "tt0133093", "Imdb") == {
            "AnyImdbId": "tt0133093"
        }


class TestSearch:
    @respx.mock
    @pytest.mark.asyncio()
    async def test_title_search(self, client: HttpxMediaServerClient) -> None:
        route = respx.get(f"{_BASE}/Items").respond(json=_ITEMS_RESPONSE)

        items = await client.search(_BASE, _EMBY, "The Matrix", "Movie")

        assert len(items) == 1
        item = items[0]
        assert item.id == "a1b2"
        assert item.server_id == "srv1"
        assert item.production_year == 1999
        assert item.provider_ids["Tmdb"] == "603"

        params = route.calls.last.request.url.params
        assert params["SearchTerm"] == "The Matrix"
        assert params["IncludeItemTypes"] == "Movie"
        assert params["Recursive"] == "true"
        assert route.calls.last.request.headers["X-Emby-Token"] == "emby-key"

    @respx.mock
    @pytest.mark.asyncio()
    async def test_provider_lookup_jellyfin(self, client: HttpxMediaServerClient) -> None:
        route = respx.get(f"{_BASE}/Items").respond(json=_ITEMS_RESPONSE)

        await client.search_by_provider_id(_BASE, _JELLYFIN, "603", "Tmdb", "Movie")

        params = route.calls.last.request.url.params
        assert params["AnyTmdbId"] == "603"
        assert "SearchTerm" not in params

    @respx.mock
    @pytest.mark.asyncio()
    async def test_missing_items_key(self, client: HttpxMediaServerClient) -> None:
        respx.get(f"{_BASE}/Items").respond(json={})
        assert await client.search(_BASE, _EMBY, "x") == []

    @respx.mock
    @pytest.mark.asyncio()
    async def test_episodes_filtered_by_season(
        self, client: HttpxMediaServerClient
    ) -> None:
        route = respx.get(f"{_BASE}/Shows/s1/Episodes").respond(
            json={
                "Items": [
                    {
                        "Id": "e1",
                        "Name": "Pilot",
                        "Type": "Episode",
                        "IndexNumber": 1,
                        "ParentIndexNumber": 2,
                    }
                ]
            }
        )

        episodes = await client.get_episodes(_BASE, _EMBY, "s1", 2)

        assert episodes[0].index_number == 1
        assert episodes[0].parent_index_number == 2
        assert route.calls.last.request.url.params["Season"] == "2"


class TestErrors:
    @respx.mock
    @pytest.mark.asyncio()
    async def test_timeout_is_network_error(self, client: HttpxMediaServerClient) -> None:
        respx.get(f"{_BASE}/Items").mock(side_effect=httpx.ReadTimeout("slow"))

        with pytest.raises(NetworkError) as exc_info:
            await client.search(_BASE, _EMBY, "x")
        assert exc_info.value.url == _BASE

    @respx.mock
    @pytest.mark.asyncio()
    async def test_connect_error_is_network_error(
        self, client: HttpxMediaServerClient
    ) -> None:
        respx.get(f"{_BASE}/Items").mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(NetworkError):
            await client.search(_BASE, _EMBY, "x")

    @respx.mock
    @pytest.mark.asyncio()
    async def test_unauthorized_is_rejection(
        self, client: HttpxMediaServerClient
    ) -> None:
        respx.get(f"{_BASE}/Items").respond(401, text="Access token is invalid")

        with pytest.raises(RemoteRejectionError) as exc_info:
            await client.search(_BASE, _EMBY, "x")
        assert exc_info.value.status == 401

    @respx.mock
    @pytest.mark.asyncio()
    async def test_invalid_json_is_rejection(
        self, client: HttpxMediaServerClient
    ) -> None:
        respx.get(f"{_BASE}/Items").respond(200, text="<html>proxy page</html>")

        with pytest.raises(RemoteRejectionError):
            await client.search(_BASE, _EMBY, "x")

    @pytest.mark.asyncio()
    async def test_missing_scheme_is_unusable(
        self, client: HttpxMediaServerClient
    ) -> None:
        with pytest.raises((ConfigurationError, NetworkError)):
            await client.search("media.example.com", _EMBY, "x")


class TestPing:
    @respx.mock
    @pytest.mark.asyncio()
    async def test_ok(self, client: HttpxMediaServerClient) -> None:
        respx.get(f"{_BASE}/System/Info/Public").respond(200, json={"Id": "srv1"})
        assert await client.ping(_BASE) is True

    @respx.mock
    @pytest.mark.asyncio()
    async def test_unreachable(self, client: HttpxMediaServerClient) -> None:
        respx.get(f"{_BASE}/System/Info/Public").mock(
            side_effect=httpx.ConnectError("refused")
        )
        assert await client.ping(_BASE) is False


class TestMalformedRows:
    @respx.mock
    @pytest.mark.asyncio()
    async def test_null_rows_are_skipped(self, client: HttpxMediaServerClient) -> None:
        respx.get(url__startswith=f"{_BASE}/Items").respond(
            200, json={"Items": [None, _ITEMS_RESPONSE["Items"][0], "junk"]}
        )

        items = await client.search_by_provider_id(_BASE, _EMBY, "603", "Tmdb")

        assert [i.id for i in items] == ["a1b2"]

    @respx.mock
    @pytest.mark.asyncio()
    async def test_only_null_rows_give_empty_list(
        self, client: HttpxMediaServerClient
    ) -> None:
        respx.get(url__startswith=f"{_BASE}/Items").respond(200, json={"Items": [None]})

        assert await client.search(_BASE, _EMBY, "matrix") == []

    @respx.mock
    @pytest.mark.asyncio()
    async def test_unparseable_row_is_classified(
        self, client: HttpxMediaServerClient
    ) -> None:
        respx.get(url__startswith=f"{_BASE}/Items").respond(
            200, json={"Items": [{"Id": "x", "ProviderIds": ["not", "a", "map"]}]}
        )

        with pytest.raises(RemoteRejectionError) as exc_info:
            await client.search(_BASE, _EMBY, "matrix")
        assert exc_info.value.url == _BASE

    @respx.mock
    @pytest.mark.asyncio()
    async def test_items_not_a_list_is_classified(
        self, client: HttpxMediaServerClient
    ) -> None:
        respx.get(url__startswith=f"{_BASE}/Items").respond(200, json={"Items": "oops"})

        with pytest.raises(RemoteRejectionError):
            await client.search(_BASE, _EMBY, "matrix")
