"""Canonical availability vocabulary and orchestrator result objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from availarr.domain.entities.media import UpstreamMediaType


class AvailabilityStatus(str, Enum):
    """The single status vocabulary consumed by every caller."""

    AVAILABLE = "available"
    PARTIAL = "partial"
    UNAVAILABLE = "unavailable"
    PENDING = "pending"
    PROCESSING = "processing"
    NOT_REQUESTED = "not_requested"
    UNKNOWN = "unknown"
    UNCONFIGURED = "unconfigured"
    ERROR = "error"


# States that carry a media-server item and therefore a deep link.
LINKABLE_STATUSES: frozenset[AvailabilityStatus] = frozenset(
    {AvailabilityStatus.AVAILABLE, AvailabilityStatus.PARTIAL}
)


@dataclass(frozen=True)
class Availability:
    """Tagged availability result.

    Only ``available``/``partial`` carry item fields, only ``partial``
    carries ``details`` and only ``error`` carries ``message``.
    """

    status: AvailabilityStatus
    item_id: str | None = None
    server_url: str | None = None
    item_url: str | None = None
    details: str | None = None
    message: str | None = None

    @classmethod
    def available(
        cls, *, item_id: str, server_url: str, item_url: str | None = None
    ) -> Availability:
        return cls(
            AvailabilityStatus.AVAILABLE,
            item_id=item_id,
            server_url=server_url,
            item_url=item_url,
        )

    @classmethod
    def partial(
        cls,
        *,
        item_id: str,
        server_url: str,
        details: str,
        item_url: str | None = None,
    ) -> Availability:
        return cls(
            AvailabilityStatus.PARTIAL,
            item_id=item_id,
            server_url=server_url,
            item_url=item_url,
            details=details,
        )

    @classmethod
    def unavailable(cls) -> Availability:
        return cls(AvailabilityStatus.UNAVAILABLE)

    @classmethod
    def unconfigured(cls) -> Availability:
        return cls(AvailabilityStatus.UNCONFIGURED)

    @classmethod
    def error(cls, message: str) -> Availability:
        return cls(AvailabilityStatus.ERROR, message=message)


@dataclass(frozen=True)
class EnrichedSearchResult:
    """A request-service search row with its canonical status and deep link."""

    id: int
    title: str
    media_type: UpstreamMediaType
    status: AvailabilityStatus
    year: int | None = None
    overview: str = ""
    poster_url: str | None = None
    server_url: str | None = None
    server_item_url: str | None = None


@dataclass(frozen=True)
class SearchOutcome:
    """Aggregate result of one search-and-enrich call."""

    results: list[EnrichedSearchResult] = field(default_factory=list)
    request_service_enabled: bool = True
    server_type: str | None = None
    request_service_url: str | None = None
    server_url: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class RequestOutcome:
    """Result of one submit-request call.

    ``error_kind`` names the classified failure (``csrf``, ``network``, ...)
    so clients can branch without parsing ``message``.
    """

    success: bool
    message: str
    error_kind: str | None = None


@dataclass(frozen=True)
class ConnectionTestOutcome:
    success: bool
    url: str | None = None
    is_local: bool = False
