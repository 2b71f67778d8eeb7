"""Emby / Jellyfin API client (async httpx implementation)."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from availarr.domain.entities.endpoints import (
    MEDIA_SERVER_PROBE_PATH,
    MediaServerSettings,
)
from availarr.domain.entities.media import ServerItem, ServerItemType
from availarr.domain.errors import (
    ConfigurationError,
    NetworkError,
    RemoteRejectionError,
)
from availarr.domain.ports.media_server import ProviderName

log = structlog.get_logger(__name__)

_SEARCH_LIMIT = 10


def build_api_headers(settings: MediaServerSettings) -> dict[str, str]:
    """Auth headers differ between the two server families."""
    headers = {"Content-Type": "application/json", "Accept": "application/json"}
    if settings.server_type == "emby":
        headers["X-Emby-Token"] = settings.api_key
    else:
        headers["Authorization"] = f'MediaBrowser Token="{settings.api_key}"'
    return headers


def provider_id_params(
    settings: MediaServerSettings, provider_id: str, provider: ProviderName
) -> dict[str, str]:
    """Query params for an exact provider-ID lookup.

    Emby takes ``AnyProviderIdEquals=Tmdb.419946``; Jellyfin takes
    ``AnyTmdbId=419946`` / ``AnyImdbId=tt1234567``.
    """
    if settings.server_type == "emby":
        return {"AnyProviderIdEquals": f"{provider}.{provider_id}"}
    return {f"Any{provider}Id": provider_id}


class HttpxMediaServerClient:
    """Async media-server client using a shared httpx.AsyncClient.

    Implements ``MediaServerPort`` from domain.ports.media_server.
    """

    def __init__(self, *, http_client: httpx.AsyncClient) -> None:
        self._http = http_client

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _get_items(
        self,
        base_url: str,
        settings: MediaServerSettings,
        path: str,
        params: dict[str, str] | None = None,
    ) -> list[ServerItem]:
        url = f"{base_url}{path}"
        try:
            resp = await self._http.get(
                url, params=params, headers=build_api_headers(settings)
            )
        except httpx.TimeoutException as exc:
            log.warning("media_server_timeout", path=path)
            raise NetworkError("Media server timed out", url=base_url) from exc
        except httpx.InvalidURL as exc:
            raise ConfigurationError(f"Media server URL is invalid: {base_url}") from exc
        except httpx.HTTPError as exc:
            log.warning("media_server_network_error", path=path, error=repr(exc))
            raise NetworkError(
                f"Could not reach media server: {exc}", url=base_url
            ) from exc

        if not resp.is_success:
            log.warning("media_server_http_error", path=path, status=resp.status_code)
            raise RemoteRejectionError(
                status=resp.status_code, body=resp.text, url=base_url
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise RemoteRejectionError(
                status=resp.status_code, body="Invalid JSON response", url=base_url
            ) from exc
        if not isinstance(data, dict):
            return []
        rows = data.get("Items") or []
        if not isinstance(rows, list):
            raise RemoteRejectionError(
                status=resp.status_code, body="Malformed Items list", url=base_url
            )
        items: list[ServerItem] = []
        for raw in rows:
            if not isinstance(raw, dict):
                log.debug("media_server_row_skipped", path=path)
                continue
            try:
                items.append(self._to_item(raw))
            except (TypeError, ValueError, AttributeError) as exc:
                raise RemoteRejectionError(
                    status=resp.status_code,
                    body=f"Malformed item: {exc}",
                    url=base_url,
                ) from exc
        return items

    @staticmethod
    def _to_item(raw: dict[str, Any]) -> ServerItem:
        return ServerItem(
            id=str(raw.get("Id", "")),
            name=raw.get("Name", ""),
            type=raw.get("Type", ""),
            server_id=raw.get("ServerId"),
            production_year=raw.get("ProductionYear"),
            provider_ids=dict(raw.get("ProviderIds") or {}),
            index_number=raw.get("IndexNumber"),
            parent_index_number=raw.get("ParentIndexNumber"),
        )

    # ------------------------------------------------------------------
    # Public API (MediaServerPort)
    # ------------------------------------------------------------------

    async def search(
        self,
        base_url: str,
        settings: MediaServerSettings,
        query: str,
        item_type: ServerItemType | None = None,
    ) -> list[ServerItem]:
        params = {
            "SearchTerm": query,
            "Recursive": "true",
            "Limit": str(_SEARCH_LIMIT),
        }
        if item_type:
            params["IncludeItemTypes"] = item_type
        return await self._get_items(base_url, settings, "/Items", params)

    async def search_by_provider_id(
        self,
        base_url: str,
        settings: MediaServerSettings,
        provider_id: str,
        provider: ProviderName,
        item_type: ServerItemType | None = None,
    ) -> list[ServerItem]:
        params = {"Recursive": "true"}
        if item_type:
            params["IncludeItemTypes"] = item_type
        params.update(provider_id_params(settings, provider_id, provider))
        return await self._get_items(base_url, settings, "/Items", params)

    async def get_seasons(
        self, base_url: str, settings: MediaServerSettings, series_id: str
    ) -> list[ServerItem]:
        return await self._get_items(
            base_url, settings, f"/Shows/{series_id}/Seasons"
        )

    async def get_episodes(
        self,
        base_url: str,
        settings: MediaServerSettings,
        series_id: str,
        season_number: int | None = None,
    ) -> list[ServerItem]:
        params = {"Season": str(season_number)} if season_number is not None else None
        return await self._get_items(
            base_url, settings, f"/Shows/{series_id}/Episodes", params
        )

    async def ping(self, base_url: str) -> bool:
        try:
            resp = await self._http.get(
                f"{base_url}{MEDIA_SERVER_PROBE_PATH}",
                headers={"Accept": "application/json"},
            )
        except (httpx.HTTPError, httpx.InvalidURL):
            log.info("media_server_ping_failed", url=base_url, exc_info=True)
            return False
        return resp.is_success
