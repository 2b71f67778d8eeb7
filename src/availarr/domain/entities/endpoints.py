"""Endpoint and connection-settings value objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

ServerType = Literal["emby", "jellyfin"]
ServiceName = Literal["media_server", "request_service"]

MEDIA_SERVER_PROBE_PATH = "/System/Info/Public"
REQUEST_SERVICE_PROBE_PATH = "/api/v1/status"


def strip_trailing_slashes(url: str | None) -> str:
    return (url or "").strip().rstrip("/")


@dataclass(frozen=True)
class ServiceEndpointPair:
    """Local/public URL candidates for one logical service."""

    public_url: str
    probe_path: str
    local_url: str | None = None


@dataclass(frozen=True)
class ResolvedEndpoint:
    """Cached outcome of a local-URL probe. Replaced wholesale, never patched."""

    url: str
    is_local: bool
    expires_at: float


@dataclass(frozen=True)
class MediaServerSettings:
    server_type: ServerType = "emby"
    url: str = ""
    local_url: str = ""
    api_key: str = ""

    @property
    def configured(self) -> bool:
        return bool(self.url and self.api_key)

    def endpoint_pair(self) -> ServiceEndpointPair:
        return ServiceEndpointPair(
            public_url=self.url,
            local_url=self.local_url or None,
            probe_path=MEDIA_SERVER_PROBE_PATH,
        )


@dataclass(frozen=True)
class RequestServiceSettings:
    enabled: bool = False
    url: str = ""
    local_url: str = ""
    api_key: str = ""

    @property
    def configured(self) -> bool:
        return bool(self.url and self.api_key)

    def endpoint_pair(self) -> ServiceEndpointPair:
        return ServiceEndpointPair(
            public_url=self.url,
            local_url=self.local_url or None,
            probe_path=REQUEST_SERVICE_PROBE_PATH,
        )


@dataclass(frozen=True)
class ServiceSettings:
    """Snapshot of both services' connection settings."""

    media_server: MediaServerSettings = field(default_factory=MediaServerSettings)
    request_service: RequestServiceSettings = field(
        default_factory=RequestServiceSettings
    )
