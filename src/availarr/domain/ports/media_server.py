"""Port for the self-hosted media server (Emby / Jellyfin)."""

from __future__ import annotations

from typing import Literal, Protocol, runtime_checkable

from availarr.domain.entities.endpoints import MediaServerSettings
from availarr.domain.entities.media import ServerItem, ServerItemType

ProviderName = Literal["Imdb", "Tmdb"]


@runtime_checkable
class MediaServerPort(Protocol):
    """Async interface for media-server item lookups.

    Every method raises ``NetworkError`` or ``RemoteRejectionError`` on
    failure, never a transport exception.
    """

    async def search(
        self,
        base_url: str,
        settings: MediaServerSettings,
        query: str,
        item_type: ServerItemType | None = None,
    ) -> list[ServerItem]:
        """Free-text search over the library."""
        ...

    async def search_by_provider_id(
        self,
        base_url: str,
        settings: MediaServerSettings,
        provider_id: str,
        provider: ProviderName,
        item_type: ServerItemType | None = None,
    ) -> list[ServerItem]:
        """Exact lookup by external provider ID."""
        ...

    async def get_seasons(
        self, base_url: str, settings: MediaServerSettings, series_id: str
    ) -> list[ServerItem]:
        ...

    async def get_episodes(
        self,
        base_url: str,
        settings: MediaServerSettings,
        series_id: str,
        season_number: int | None = None,
    ) -> list[ServerItem]:
        ...

    async def ping(self, base_url: str) -> bool:
        """Unauthenticated reachability check."""
        ...
