"""Port for local/public endpoint resolution."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from availarr.domain.entities.endpoints import ServiceEndpointPair


@runtime_checkable
class EndpointResolverPort(Protocol):
    """Picks the reachable URL of a local/public pair, with a TTL cache."""

    async def resolve(self, pair: ServiceEndpointPair) -> str:
        """Return the local URL when reachable, else the public URL.

        Never raises; probe failures degrade to the public URL.
        """
        ...

    async def probe(self, url: str, probe_path: str) -> bool:
        """Return True if ``url + probe_path`` answers with a 2xx status."""
        ...

    def is_using_local(self, pair: ServiceEndpointPair) -> bool:
        """Whether the cached resolution for *pair* is the local URL."""
        ...

    def invalidate(self) -> None:
        """Drop every cached resolution."""
        ...
