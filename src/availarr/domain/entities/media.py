"""Domain entities for detected media and upstream search rows.

Pure value objects with no framework dependencies and no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Union

DetectedMediaType = Literal["movie", "series", "season", "episode"]
UpstreamMediaType = Literal["movie", "tv"]
ServerItemType = Literal["Movie", "Series", "Season", "Episode"]

# Used when a season/episode page is detected but the number could not be
# extracted.  Can mismatch real content (see DESIGN.md).
DEFAULT_SEASON_NUMBER = 1
DEFAULT_EPISODE_NUMBER = 1


@dataclass(frozen=True)
class DetectedMovie:
    title: str
    year: int | None = None
    imdb_id: str | None = None
    tmdb_id: str | None = None
    kind: Literal["movie"] = "movie"

    @property
    def search_title(self) -> str:
        return self.title


@dataclass(frozen=True)
class DetectedSeries:
    title: str
    year: int | None = None
    imdb_id: str | None = None
    tmdb_id: str | None = None
    kind: Literal["series"] = "series"

    @property
    def search_title(self) -> str:
        return self.title


@dataclass(frozen=True)
class DetectedSeason:
    series_title: str
    season_number: int = DEFAULT_SEASON_NUMBER
    year: int | None = None
    imdb_id: str | None = None
    tmdb_id: str | None = None
    kind: Literal["season"] = "season"

    @property
    def search_title(self) -> str:
        return self.series_title


@dataclass(frozen=True)
class DetectedEpisode:
    series_title: str
    season_number: int = DEFAULT_SEASON_NUMBER
    episode_number: int = DEFAULT_EPISODE_NUMBER
    year: int | None = None
    imdb_id: str | None = None
    tmdb_id: str | None = None
    kind: Literal["episode"] = "episode"

    @property
    def search_title(self) -> str:
        return self.series_title


DetectedMedia = Union[DetectedMovie, DetectedSeries, DetectedSeason, DetectedEpisode]


def parse_year(value: object) -> int | None:
    """Parse a year from an int or a date-like string ("1999", "1999-03-31").

    Anything that does not yield four leading digits is treated as unknown.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    text = str(value).strip()
    head = text[:4]
    if len(head) == 4 and head.isdigit():
        return int(head)
    return None


def build_detected_media(
    *,
    media_type: DetectedMediaType,
    title: str,
    year: object = None,
    imdb_id: str | None = None,
    tmdb_id: str | None = None,
    season_number: int | None = None,
    episode_number: int | None = None,
) -> DetectedMedia:
    """Build a DetectedMedia variant from a flat payload.

    Season/episode numbers fall back to 1 when missing.
    """
    parsed_year = parse_year(year)
    imdb_id = imdb_id or None
    tmdb_id = tmdb_id or None

    if media_type == "movie":
        return DetectedMovie(
            title=title, year=parsed_year, imdb_id=imdb_id, tmdb_id=tmdb_id
        )
    if media_type == "series":
        return DetectedSeries(
            title=title, year=parsed_year, imdb_id=imdb_id, tmdb_id=tmdb_id
        )
    if media_type == "season":
        return DetectedSeason(
            series_title=title,
            season_number=season_number or DEFAULT_SEASON_NUMBER,
            year=parsed_year,
            imdb_id=imdb_id,
            tmdb_id=tmdb_id,
        )
    if media_type == "episode":
        return DetectedEpisode(
            series_title=title,
            season_number=season_number or DEFAULT_SEASON_NUMBER,
            episode_number=episode_number or DEFAULT_EPISODE_NUMBER,
            year=parsed_year,
            imdb_id=imdb_id,
            tmdb_id=tmdb_id,
        )
    raise ValueError(f"Unsupported media type: {media_type!r}")


def upstream_media_type(media: DetectedMedia) -> UpstreamMediaType:
    """Request-service media type for a detected item (movie or tv)."""
    return "movie" if media.kind == "movie" else "tv"


@dataclass(frozen=True)
class UpstreamSearchResult:
    """One row of the request service's search response."""

    id: int
    media_type: UpstreamMediaType
    title: str
    release_or_air_date: str = ""
    overview: str = ""
    poster_path: str | None = None
    remote_status_code: int | None = None  # None when mediaInfo is absent
    provider_ids: dict[str, str] = field(default_factory=dict)

    @property
    def year(self) -> int | None:
        return parse_year(self.release_or_air_date)


@dataclass(frozen=True)
class ServerItem:
    """An item from the media server's /Items API."""

    id: str
    name: str
    type: str
    server_id: str | None = None
    production_year: int | None = None
    provider_ids: dict[str, str] = field(default_factory=dict)
    index_number: int | None = None  # season or episode number
    parent_index_number: int | None = None  # season number of an episode


@dataclass(frozen=True)
class RequestReceipt:
    """Acknowledgement returned by the request service after a submission."""

    request_id: int
    status: int | None = None
    media_id: int | None = None
