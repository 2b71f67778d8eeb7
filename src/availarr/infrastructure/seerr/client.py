"""Jellyseerr / Overseerr API client (async httpx implementation)."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote, unquote

import httpx
import structlog

from availarr.domain.entities.endpoints import (
    REQUEST_SERVICE_PROBE_PATH,
    RequestServiceSettings,
)
from availarr.domain.entities.media import (
    RequestReceipt,
    UpstreamMediaType,
    UpstreamSearchResult,
)
from availarr.domain.errors import (
    ConfigurationError,
    EmptyQueryError,
    NetworkError,
    RemoteRejectionError,
    classify_rejection,
)

log = structlog.get_logger(__name__)

_CSRF_COOKIE_NAMES = ("XSRF-TOKEN", "_csrf")
_CSRF_HEADER = "x-xsrf-token"


def build_seerr_headers(settings: RequestServiceSettings) -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        "Accept": "application/json",
        "X-Api-Key": settings.api_key,
    }


def _to_search_result(raw: dict[str, Any]) -> UpstreamSearchResult | None:
    """Convert one search row; person rows and malformed rows yield None."""
    media_type = raw.get("mediaType")
    if media_type not in ("movie", "tv") or raw.get("id") is None:
        return None

    media_info = raw.get("mediaInfo") or {}
    if not isinstance(media_info, dict):
        media_info = {}
    provider_ids = {"tmdb": str(raw["id"])}
    if media_info.get("imdbId"):
        provider_ids["imdb"] = str(media_info["imdbId"])
    if media_info.get("tvdbId"):
        provider_ids["tvdb"] = str(media_info["tvdbId"])

    return UpstreamSearchResult(
        id=int(raw["id"]),
        media_type=media_type,
        title=raw.get("title") or raw.get("name") or "Unknown",
        release_or_air_date=raw.get("releaseDate") or raw.get("firstAirDate") or "",
        overview=raw.get("overview") or "",
        poster_path=raw.get("posterPath"),
        remote_status_code=media_info.get("status") if media_info else None,
        provider_ids=provider_ids,
    )


class HttpxSeerrClient:
    """Async request-service client using a shared httpx.AsyncClient.

    Implements ``RequestServicePort`` from domain.ports.request_service.
    The shared client keeps cookies, which lets the CSRF secret cookie set
    by ``/api/v1/status`` travel with the following mutation.
    """

    def __init__(self, *, http_client: httpx.AsyncClient) -> None:
        self._http = http_client

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _send(
        self,
        method: str,
        base_url: str,
        url: str,
        *,
        headers: dict[str, str],
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        try:
            resp = await self._http.request(method, url, headers=headers, json=json)
        except httpx.TimeoutException as exc:
            log.warning("seerr_timeout", method=method, url=url)
            raise NetworkError("Request service timed out", url=base_url) from exc
        except httpx.InvalidURL as exc:
            raise ConfigurationError(
                f"Request service URL is invalid: {base_url}"
            ) from exc
        except httpx.HTTPError as exc:
            log.warning("seerr_network_error", method=method, url=url, error=repr(exc))
            raise NetworkError(
                f"Could not reach request service: {exc}", url=base_url
            ) from exc

        if not resp.is_success:
            log.error(
                "seerr_http_error",
                method=method,
                url=url,
                status=resp.status_code,
                body=resp.text[:200],
            )
            raise classify_rejection(
                status=resp.status_code, body=resp.text, url=base_url
            )
        return resp

    async def _fetch_csrf_token(
        self, base_url: str, headers: dict[str, str]
    ) -> str | None:
        """Fetch the CSRF token cookie set by the status endpoint.

        Best effort: a server without CSRF protection sets no cookie.
        """
        try:
            resp = await self._http.get(
                f"{base_url}{REQUEST_SERVICE_PROBE_PATH}", headers=headers
            )
        except (httpx.HTTPError, httpx.InvalidURL):
            log.warning("seerr_csrf_fetch_failed", url=base_url, exc_info=True)
            return None

        for name in _CSRF_COOKIE_NAMES:
            value = resp.cookies.get(name) or self._http.cookies.get(name)
            if value:
                log.debug("seerr_csrf_token_found", cookie=name)
                return unquote(value)
        return None

    # ------------------------------------------------------------------
    # Public API (RequestServicePort)
    # ------------------------------------------------------------------

    async def search(
        self, base_url: str, settings: RequestServiceSettings, query: str
    ) -> list[UpstreamSearchResult]:
        trimmed = query.strip()
        if not trimmed:
            raise EmptyQueryError(query)

        # The service rejects '+' for spaces; percent-encode everything.
        url = (
            f"{base_url}/api/v1/search?query={quote(trimmed, safe='')}"
            "&page=1&language=en"
        )
        log.debug("seerr_search", url=url)
        resp = await self._send(
            "GET", base_url, url, headers=build_seerr_headers(settings)
        )
        try:
            data = resp.json()
        except ValueError as exc:
            raise RemoteRejectionError(
                status=resp.status_code, body="Invalid JSON response", url=base_url
            ) from exc

        rows = data.get("results") if isinstance(data, dict) else None
        if rows is not None and not isinstance(rows, list):
            raise RemoteRejectionError(
                status=resp.status_code, body="Malformed results list", url=base_url
            )
        results: list[UpstreamSearchResult] = []
        for raw in rows or []:
            if not isinstance(raw, dict):
                log.debug("seerr_row_skipped", url=url)
                continue
            try:
                row = _to_search_result(raw)
            except (TypeError, ValueError, AttributeError) as exc:
                raise RemoteRejectionError(
                    status=resp.status_code,
                    body=f"Malformed search row: {exc}",
                    url=base_url,
                ) from exc
            if row is not None:
                results.append(row)
        return results

    async def request_media(
        self,
        base_url: str,
        settings: RequestServiceSettings,
        media_type: UpstreamMediaType,
        media_id: int,
        seasons: list[int] | None = None,
    ) -> RequestReceipt:
        headers = build_seerr_headers(settings)
        token = await self._fetch_csrf_token(base_url, headers)
        if token:
            headers[_CSRF_HEADER] = token

        body: dict[str, Any] = {"mediaType": media_type, "mediaId": media_id}
        if media_type == "tv" and seasons:
            body["seasons"] = seasons

        resp = await self._send(
            "POST", base_url, f"{base_url}/api/v1/request", headers=headers, json=body
        )
        try:
            data = resp.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        media = data.get("media") or {}
        log.info(
            "seerr_request_created",
            media_type=media_type,
            media_id=media_id,
            seasons=seasons,
            request_id=data.get("id"),
        )
        return RequestReceipt(
            request_id=int(data.get("id") or 0),
            status=data.get("status"),
            media_id=media.get("id"),
        )

    async def ping(self, base_url: str, settings: RequestServiceSettings) -> bool:
        try:
            resp = await self._http.get(
                f"{base_url}{REQUEST_SERVICE_PROBE_PATH}",
                headers=build_seerr_headers(settings),
            )
        except (httpx.HTTPError, httpx.InvalidURL):
            log.info("seerr_ping_failed", url=base_url, exc_info=True)
            return False
        return resp.is_success
