"""Request orchestration: the entry point for every user action.

Each operation reads the current settings, resolves the endpoint(s) it
needs, queries the relevant upstream, maps statuses into the canonical
vocabulary and returns one result value.  Classified errors are converted
into result values here; nothing is retried.
"""

from __future__ import annotations

import asyncio
import functools

import structlog

from availarr.application.matching import MatchingEngine, narrow_candidates
from availarr.domain.deep_link import build_server_item_url
from availarr.domain.entities.availability import (
    LINKABLE_STATUSES,
    Availability,
    ConnectionTestOutcome,
    EnrichedSearchResult,
    RequestOutcome,
    SearchOutcome,
)
from availarr.domain.entities.endpoints import (
    MediaServerSettings,
    ServiceEndpointPair,
    ServiceName,
)
from availarr.domain.entities.media import (
    DetectedMedia,
    ServerItem,
    UpstreamMediaType,
    UpstreamSearchResult,
    upstream_media_type,
)
from availarr.domain.errors import AvailarrError, ConfigurationError, EmptyQueryError
from availarr.domain.ports import (
    ConfigProviderPort,
    EndpointResolverPort,
    MediaServerPort,
    RequestServicePort,
)
from availarr.domain.status import map_media_status

log = structlog.get_logger(__name__)

_POSTER_BASE = "https://image.tmdb.org/t/p/w185"

DEFAULT_SERVER_RESOLVE_TIMEOUT = 4.0
DEFAULT_ENRICHMENT_TIMEOUT = 5.0
DEFAULT_MAX_RESULTS = 5

REQUEST_SERVICE_DISABLED_MESSAGE = "Request service is not enabled"


def _parse_media_id(value: object) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        media_id = int(str(value).strip())
    except ValueError:
        return None
    return media_id if media_id > 0 else None


def _prefer_year(items: list[ServerItem], year: int | None) -> ServerItem:
    if year is not None:
        for item in items:
            if item.production_year == year:
                return item
    return items[0]


class RequestOrchestrator:
    """Check availability, search-and-enrich, submit requests, test connections."""

    def __init__(
        self,
        *,
        config: ConfigProviderPort,
        resolver: EndpointResolverPort,
        media_server: MediaServerPort,
        request_service: RequestServicePort,
        matcher: MatchingEngine | None = None,
        server_resolve_timeout: float = DEFAULT_SERVER_RESOLVE_TIMEOUT,
        enrichment_timeout: float = DEFAULT_ENRICHMENT_TIMEOUT,
        max_results: int = DEFAULT_MAX_RESULTS,
    ) -> None:
        self._config = config
        self._resolver = resolver
        self._media_server = media_server
        self._request_service = request_service
        self._matcher = matcher or MatchingEngine(max_candidates=max_results)
        self._server_resolve_timeout = server_resolve_timeout
        self._enrichment_timeout = enrichment_timeout
        self._max_results = max_results

    # ------------------------------------------------------------------
    # Check availability (media server)
    # ------------------------------------------------------------------

    async def check_availability(self, media: DetectedMedia) -> Availability:
        """Search the media server directly for *media*.

        Returns ``unconfigured`` without any network call when the media
        server has no URL or API key, and ``error`` for classified failures.
        """
        server = self._config.get().media_server
        if not server.configured:
            return Availability.unconfigured()

        if not (media.imdb_id or media.tmdb_id or media.search_title.strip()):
            blank = EmptyQueryError(media.search_title)
            log.info("availability_check_skipped", reason=blank.kind)
            return Availability.error(blank.user_message())

        base_url = await self._resolver.resolve(server.endpoint_pair())
        try:
            return await self._locate_on_server(base_url, server, media)
        except AvailarrError as exc:
            log.warning(
                "availability_check_failed",
                kind=exc.kind,
                url=base_url,
                error=exc.message,
            )
            return Availability.error(exc.user_message())

    async def _locate_on_server(
        self, base_url: str, server: MediaServerSettings, media: DetectedMedia
    ) -> Availability:
        # Provider IDs are the most reliable match; IMDb first, then TMDB.
        for provider, value in (("Imdb", media.imdb_id), ("Tmdb", media.tmdb_id)):
            if not value:
                continue
            items = await self._media_server.search_by_provider_id(
                base_url, server, value, provider
            )
            if items:
                return await self._resolve_server_match(base_url, server, items, media)

        title = media.search_title.strip()
        if not title:
            raise EmptyQueryError(media.search_title)

        item_type = "Movie" if media.kind == "movie" else "Series"
        items = await self._media_server.search(base_url, server, title, item_type)
        if not items:
            return Availability.unavailable()
        return await self._resolve_server_match(base_url, server, items, media)

    async def _resolve_server_match(
        self,
        base_url: str,
        server: MediaServerSettings,
        items: list[ServerItem],
        media: DetectedMedia,
    ) -> Availability:
        if media.kind in ("movie", "series"):
            wanted = "Movie" if media.kind == "movie" else "Series"
            typed = [i for i in items if i.type == wanted]
            match = _prefer_year(typed, media.year) if typed else items[0]
            return self._available(base_url, server, match)

        series_items = [i for i in items if i.type == "Series"]
        if not series_items:
            return Availability.unavailable()
        series = _prefer_year(series_items, media.year)

        if media.kind == "season":
            seasons = await self._media_server.get_seasons(base_url, server, series.id)
            season = next(
                (
                    s
                    for s in seasons
                    if media.season_number in (s.parent_index_number, s.index_number)
                ),
                None,
            )
            if season is not None:
                return self._available(base_url, server, season)
            return self._partial(
                base_url,
                server,
                series,
                f"Season {media.season_number} not found, but series exists",
            )

        episodes = await self._media_server.get_episodes(
            base_url, server, series.id, media.season_number
        )
        episode = next(
            (
                e
                for e in episodes
                if e.index_number == media.episode_number
                and e.parent_index_number == media.season_number
            ),
            None,
        )
        if episode is not None:
            return self._available(base_url, server, episode)
        return self._partial(
            base_url,
            server,
            series,
            f"S{media.season_number}E{media.episode_number} not found, "
            "but series exists",
        )

    @staticmethod
    def _available(
        base_url: str, server: MediaServerSettings, item: ServerItem
    ) -> Availability:
        return Availability.available(
            item_id=item.id,
            server_url=base_url,
            item_url=build_server_item_url(
                server.server_type, base_url, item.id, item.server_id
            ),
        )

    @staticmethod
    def _partial(
        base_url: str, server: MediaServerSettings, item: ServerItem, details: str
    ) -> Availability:
        return Availability.partial(
            item_id=item.id,
            server_url=base_url,
            details=details,
            item_url=build_server_item_url(
                server.server_type, base_url, item.id, item.server_id
            ),
        )

    # ------------------------------------------------------------------
    # Search and enrich (request service + media server deep links)
    # ------------------------------------------------------------------

    async def search_and_enrich(
        self,
        query: str,
        media_type: UpstreamMediaType | None = None,
        year: object = None,
    ) -> SearchOutcome:
        """Search the request service and attach media-server deep links.

        An empty upstream result is a valid, error-free outcome.
        """
        settings = self._config.get()
        seerr = settings.request_service
        server = settings.media_server

        if not seerr.enabled:
            return SearchOutcome(
                results=[],
                request_service_enabled=False,
                server_type=server.server_type,
                error=(
                    f"{REQUEST_SERVICE_DISABLED_MESSAGE}. "
                    "Configure it in the extension settings."
                ),
            )
        if not seerr.configured:
            missing = ConfigurationError("Request service URL or API key is missing")
            return SearchOutcome(
                results=[],
                server_type=server.server_type,
                error=missing.user_message(),
            )

        if not query.strip():
            blank = EmptyQueryError(query)
            return SearchOutcome(
                results=[],
                server_type=server.server_type,
                error=blank.user_message(),
            )

        seerr_url = await self._resolver.resolve(seerr.endpoint_pair())
        try:
            rows = await self._request_service.search(seerr_url, seerr, query)
        except AvailarrError as exc:
            log.warning(
                "search_failed", kind=exc.kind, url=seerr_url, error=exc.message
            )
            return SearchOutcome(
                results=[],
                server_type=server.server_type,
                request_service_url=seerr_url,
                error=exc.user_message(),
            )

        narrowed = narrow_candidates(rows, media_type=media_type, year=year)
        narrowed = narrowed[: self._max_results]

        server_url: str | None = None
        if server.configured and narrowed:
            server_url = await self._resolve_bounded(server.endpoint_pair())

        results = await asyncio.gather(
            *(self._enrich(row, server, server_url) for row in narrowed)
        )
        return SearchOutcome(
            results=list(results),
            request_service_enabled=True,
            server_type=server.server_type,
            request_service_url=seerr_url,
            server_url=server_url or server.url or None,
        )

    async def _resolve_bounded(self, pair: ServiceEndpointPair) -> str | None:
        try:
            return await asyncio.wait_for(
                self._resolver.resolve(pair), timeout=self._server_resolve_timeout
            )
        except asyncio.TimeoutError:
            log.warning(
                "server_resolve_timeout", timeout_seconds=self._server_resolve_timeout
            )
            return None

    async def _enrich(
        self,
        row: UpstreamSearchResult,
        server: MediaServerSettings,
        server_url: str | None,
    ) -> EnrichedSearchResult:
        status = map_media_status(row.remote_status_code)
        item_url: str | None = None
        if status in LINKABLE_STATUSES and server_url:
            item_url = await self._lookup_deep_link(row, server, server_url)

        return EnrichedSearchResult(
            id=row.id,
            title=row.title,
            media_type=row.media_type,
            status=status,
            year=row.year,
            overview=row.overview,
            poster_url=f"{_POSTER_BASE}{row.poster_path}" if row.poster_path else None,
            server_url=server_url or server.url or None,
            server_item_url=item_url,
        )

    async def _lookup_deep_link(
        self, row: UpstreamSearchResult, server: MediaServerSettings, server_url: str
    ) -> str | None:
        """One bounded TMDB lookup on the media server; failures yield None."""
        item_type = "Movie" if row.media_type == "movie" else "Series"
        try:
            items = await asyncio.wait_for(
                self._media_server.search_by_provider_id(
                    server_url, server, str(row.id), "Tmdb", item_type
                ),
                timeout=self._enrichment_timeout,
            )
        except asyncio.TimeoutError:
            log.warning("enrichment_lookup_timeout", tmdb_id=row.id, url=server_url)
            return None
        except AvailarrError as exc:
            log.warning(
                "enrichment_lookup_failed",
                tmdb_id=row.id,
                url=server_url,
                kind=exc.kind,
                error=exc.message,
            )
            return None
        except Exception:
            log.warning(
                "enrichment_lookup_crashed",
                tmdb_id=row.id,
                url=server_url,
                exc_info=True,
            )
            return None

        if not items:
            log.info("enrichment_no_server_item", tmdb_id=row.id)
            return None
        match = items[0]
        return build_server_item_url(
            server.server_type, server_url, match.id, match.server_id
        )

    # ------------------------------------------------------------------
    # Submit request (request service)
    # ------------------------------------------------------------------

    async def submit_request(
        self, media: DetectedMedia, provider_id: object = None
    ) -> RequestOutcome:
        """Submit an acquisition request for *media*.

        A usable TMDB ID (``provider_id`` or the item's own) skips the match
        cascade entirely.
        """
        seerr = self._config.get().request_service
        if not seerr.enabled:
            return RequestOutcome(
                success=False,
                message=REQUEST_SERVICE_DISABLED_MESSAGE,
                error_kind=ConfigurationError.kind,
            )
        if not seerr.configured:
            missing = ConfigurationError("Request service URL or API key is missing")
            return RequestOutcome(
                success=False, message=missing.user_message(), error_kind=missing.kind
            )

        candidate_id = provider_id if provider_id is not None else media.tmdb_id
        media_id = _parse_media_id(candidate_id)
        if media_id is None and not media.search_title.strip():
            blank = EmptyQueryError(media.search_title)
            return RequestOutcome(
                success=False, message=blank.user_message(), error_kind=blank.kind
            )

        base_url = await self._resolver.resolve(seerr.endpoint_pair())
        log.info(
            "request_media_started",
            configured_url=seerr.url,
            local_url=seerr.local_url or None,
            resolved_url=base_url,
            title=media.search_title,
            kind=media.kind,
            tmdb_id=candidate_id,
        )

        try:
            if media_id is None:
                search = functools.partial(
                    self._request_service.search, base_url, seerr
                )
                match = await self._matcher.locate(media, search)
                media_id = match.id

            upstream_type = upstream_media_type(media)
            seasons = (
                [media.season_number] if media.kind in ("season", "episode") else None
            )
            await self._request_service.request_media(
                base_url, seerr, upstream_type, media_id, seasons
            )
        except AvailarrError as exc:
            if exc.url is None:
                exc.url = base_url
            log.error(
                "request_media_failed",
                kind=exc.kind,
                url=base_url,
                error=exc.message,
            )
            return RequestOutcome(
                success=False, message=exc.user_message(), error_kind=exc.kind
            )

        log.info("request_submitted", url=base_url, media_id=media_id)
        return RequestOutcome(
            success=True, message=f"Request submitted successfully to {base_url}!"
        )

    # ------------------------------------------------------------------
    # Connection tests
    # ------------------------------------------------------------------

    async def test_connection(self, service: ServiceName) -> ConnectionTestOutcome:
        settings = self._config.get()
        if service == "media_server":
            server = settings.media_server
            if not server.url:
                return ConnectionTestOutcome(success=False)
            pair = server.endpoint_pair()
            url = await self._resolver.resolve(pair)
            ok = await self._media_server.ping(url)
        elif service == "request_service":
            seerr = settings.request_service
            if not seerr.configured:
                return ConnectionTestOutcome(success=False)
            pair = seerr.endpoint_pair()
            url = await self._resolver.resolve(pair)
            ok = await self._request_service.ping(url, seerr)
        else:
            raise ValueError(f"Unknown service: {service!r}")

        log.info("connection_tested", service=service, url=url, success=ok)
        return ConnectionTestOutcome(
            success=ok, url=url, is_local=self._resolver.is_using_local(pair)
        )
