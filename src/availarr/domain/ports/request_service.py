"""Port for the request-management service (Jellyseerr / Overseerr)."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from availarr.domain.entities.endpoints import RequestServiceSettings
from availarr.domain.entities.media import (
    RequestReceipt,
    UpstreamMediaType,
    UpstreamSearchResult,
)


@runtime_checkable
class RequestServicePort(Protocol):
    """Async interface for catalog search and acquisition requests."""

    async def search(
        self, base_url: str, settings: RequestServiceSettings, query: str
    ) -> list[UpstreamSearchResult]:
        """Search the global catalog.

        Raises ``EmptyQueryError`` for a blank query before any request.
        """
        ...

    async def request_media(
        self,
        base_url: str,
        settings: RequestServiceSettings,
        media_type: UpstreamMediaType,
        media_id: int,
        seasons: list[int] | None = None,
    ) -> RequestReceipt:
        """Submit an acquisition request.

        Non-2xx answers raise the result of ``classify_rejection``.
        """
        ...

    async def ping(self, base_url: str, settings: RequestServiceSettings) -> bool:
        ...
