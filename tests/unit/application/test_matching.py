"""Tests for the match cascade."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from availarr.application.matching import MatchingEngine, narrow_candidates
from availarr.domain.entities import (
    DetectedMovie,
    DetectedSeason,
    DetectedSeries,
    UpstreamSearchResult,
)
from availarr.domain.errors import EmptyQueryError, NotFoundError


def _row(
    id_: int,
    title: str,
    media_type: str = "movie",
    date: str = "",
    imdb: str | None = None,
) -> UpstreamSearchResult:
    provider_ids = {"tmdb": str(id_)}
    if imdb:
        provider_ids["imdb"] = imdb
    return UpstreamSearchResult(
        id=id_,
        media_type=media_type,  # type: ignore[arg-type]
        title=title,
        release_or_air_date=date,
        provider_ids=provider_ids,
    )


_DUNE_ROWS = [
    _row(841, "Dune", date="1984-12-14"),
    _row(438631, "Dune", date="2021-09-15", imdb="tt1160419"),
    _row(90228, "Dune", media_type="tv", date="2000-12-03"),
]


class TestNarrowCandidates:
    def test_filters_by_media_type(self) -> None:
        result = narrow_candidates(_DUNE_ROWS, media_type="tv")
        assert [r.id for r in result] == [90228]

    def test_year_preferred(self) -> None:
        result = narrow_candidates(_DUNE_ROWS, media_type="movie", year=2021)
        assert [r.id for r in result] == [438631]

    def test_year_never_empties_set(self) -> None:
        result = narrow_candidates(_DUNE_ROWS, media_type="movie", year=1950)
        assert [r.id for r in result] == [841, 438631]

    def test_unparseable_year_ignored(self) -> None:
        result = narrow_candidates(_DUNE_ROWS, media_type="movie", year="soon")
        assert len(result) == 2

    def test_no_filters_keeps_order(self) -> None:
        assert narrow_candidates(_DUNE_ROWS) == _DUNE_ROWS


class TestMatchingEngine:
    @pytest.mark.asyncio()
    async def test_provider_id_wins_over_order(self) -> None:
        search = AsyncMock(return_value=_DUNE_ROWS)
        media = DetectedMovie(title="Dune", imdb_id="tt1160419")

        found = await MatchingEngine().candidates(media, search)

        assert [r.id for r in found] == [438631]
        search.assert_awaited_once_with("Dune")

    @pytest.mark.asyncio()
    async def test_year_scoped_title_match(self) -> None:
        search = AsyncMock(return_value=_DUNE_ROWS)
        best = await MatchingEngine().locate(
            DetectedMovie(title="Dune", year=1984), search
        )
        assert best.id == 841

    @pytest.mark.asyncio()
    async def test_title_only_takes_first(self) -> None:
        search = AsyncMock(return_value=_DUNE_ROWS)
        best = await MatchingEngine().locate(DetectedMovie(title="Dune"), search)
        assert best.id == 841

    @pytest.mark.asyncio()
    async def test_unmatched_provider_id_falls_through(self) -> None:
        search = AsyncMock(return_value=_DUNE_ROWS)
        media = DetectedMovie(title="Dune", tmdb_id="1", year=2021)
        best = await MatchingEngine().locate(media, search)
        assert best.id == 438631

    @pytest.mark.asyncio()
    async def test_series_kinds_match_tv_rows(self) -> None:
        search = AsyncMock(return_value=_DUNE_ROWS)
        best = await MatchingEngine().locate(
            DetectedSeason(series_title="Dune", season_number=1), search
        )
        assert best.id == 90228

    @pytest.mark.asyncio()
    async def test_max_candidates(self) -> None:
        rows = [_row(i, f"Movie {i}") for i in range(1, 10)]
        search = AsyncMock(return_value=rows)
        found = await MatchingEngine(max_candidates=3).candidates(
            DetectedMovie(title="Movie"), search
        )
        assert [r.id for r in found] == [1, 2, 3]

    @pytest.mark.asyncio()
    async def test_not_found(self) -> None:
        search = AsyncMock(return_value=[_row(1, "Other", media_type="movie")])
        with pytest.raises(NotFoundError):
            await MatchingEngine().locate(DetectedSeries(title="Dark"), search)

    @pytest.mark.asyncio()
    async def test_blank_title_raises_before_search(self) -> None:
        search = AsyncMock(return_value=_DUNE_ROWS)
        with pytest.raises(EmptyQueryError):
            await MatchingEngine().locate(DetectedMovie(title="   "), search)
        search.assert_not_awaited()
