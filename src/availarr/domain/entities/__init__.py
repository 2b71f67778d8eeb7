from .availability import (
    LINKABLE_STATUSES,
    Availability,
    AvailabilityStatus,
    ConnectionTestOutcome,
    EnrichedSearchResult,
    RequestOutcome,
    SearchOutcome,
)
from .endpoints import (
    MediaServerSettings,
    RequestServiceSettings,
    ResolvedEndpoint,
    ServerType,
    ServiceEndpointPair,
    ServiceName,
    ServiceSettings,
)
from .media import (
    DetectedEpisode,
    DetectedMedia,
    DetectedMediaType,
    DetectedMovie,
    DetectedSeason,
    DetectedSeries,
    RequestReceipt,
    ServerItem,
    UpstreamMediaType,
    UpstreamSearchResult,
    build_detected_media,
    parse_year,
    upstream_media_type,
)

__all__ = [
    "LINKABLE_STATUSES",
    "Availability",
    "AvailabilityStatus",
    "ConnectionTestOutcome",
    "DetectedEpisode",
    "DetectedMedia",
    "DetectedMediaType",
    "DetectedMovie",
    "DetectedSeason",
    "DetectedSeries",
    "EnrichedSearchResult",
    "MediaServerSettings",
    "RequestOutcome",
    "RequestReceipt",
    "RequestServiceSettings",
    "ResolvedEndpoint",
    "SearchOutcome",
    "ServerItem",
    "ServerType",
    "ServiceEndpointPair",
    "ServiceName",
    "ServiceSettings",
    "UpstreamMediaType",
    "UpstreamSearchResult",
    "build_detected_media",
    "parse_year",
    "upstream_media_type",
]
