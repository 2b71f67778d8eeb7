"""Match cascade: turn a loosely identified item into one upstream row."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence

import structlog

from availarr.domain.entities.media import (
    DetectedMedia,
    UpstreamMediaType,
    UpstreamSearchResult,
    parse_year,
    upstream_media_type,
)
from availarr.domain.errors import EmptyQueryError, NotFoundError

log = structlog.get_logger(__name__)

UpstreamSearch = Callable[[str], Awaitable[list[UpstreamSearchResult]]]

DEFAULT_MAX_CANDIDATES = 5


def narrow_candidates(
    results: Sequence[UpstreamSearchResult],
    *,
    media_type: UpstreamMediaType | None = None,
    year: object = None,
) -> list[UpstreamSearchResult]:
    """Filter by media type, then prefer rows released in *year*.

    The year filter is dropped when it would leave nothing, so it can never
    empty a non-empty candidate set.  A year that does not parse is ignored.
    """
    filtered = list(results)
    if media_type is not None:
        filtered = [r for r in filtered if r.media_type == media_type]

    target_year = parse_year(year)
    if target_year is not None:
        year_matched = [r for r in filtered if r.year == target_year]
        if year_matched:
            filtered = year_matched
    return filtered


def _provider_match(
    media: DetectedMedia, candidates: Sequence[UpstreamSearchResult]
) -> UpstreamSearchResult | None:
    wanted = {
        name: value
        for name, value in (("tmdb", media.tmdb_id), ("imdb", media.imdb_id))
        if value
    }
    for candidate in candidates:
        for name, value in wanted.items():
            if candidate.provider_ids.get(name) == str(value):
                return candidate
    return None


class MatchingEngine:
    """Run the cascade: exact provider ID → year-scoped title → title only.

    Tie-breaking is positional: the upstream's own ordering decides.
    """

    def __init__(self, *, max_candidates: int = DEFAULT_MAX_CANDIDATES) -> None:
        self._max_candidates = max_candidates

    async def candidates(
        self, media: DetectedMedia, search: UpstreamSearch
    ) -> list[UpstreamSearchResult]:
        """Return up to ``max_candidates`` rows in cascade order.

        Raises:
            EmptyQueryError: the item has a blank title (no request is sent).
        """
        query = media.search_title.strip()
        if not query:
            raise EmptyQueryError(media.search_title)

        results = await search(query)

        if media.tmdb_id or media.imdb_id:
            exact = _provider_match(media, results)
            if exact is not None:
                log.debug("match_provider_id", id=exact.id, title=exact.title)
                return [exact]

        narrowed = narrow_candidates(
            results, media_type=upstream_media_type(media), year=media.year
        )
        return narrowed[: self._max_candidates]

    async def locate(
        self, media: DetectedMedia, search: UpstreamSearch
    ) -> UpstreamSearchResult:
        """Return the single best match.

        Raises:
            EmptyQueryError: blank title.
            NotFoundError: the cascade produced no candidate.
        """
        found = await self.candidates(media, search)
        if not found:
            log.info("match_not_found", title=media.search_title, kind=media.kind)
            raise NotFoundError(
                title=media.search_title, media_type=upstream_media_type(media)
            )
        best = found[0]
        log.debug("match_located", id=best.id, title=best.title, year=best.year)
        return best
