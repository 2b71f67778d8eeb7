"""Local/public endpoint resolution with a TTL cache.

Each backend service may be configured with a LAN URL next to its public
URL.  The LAN URL is preferred when a quick probe succeeds; the outcome is
cached for ``ttl_seconds`` so the (possibly slow) probe does not run on every
request.  A stale entry is an accepted trade-off for latency: a NAS that went
to sleep keeps being addressed by its local URL until the entry expires or
the cache is invalidated by a configuration change.

Single-loop asyncio use only: two concurrent resolutions of the same pair may
both probe, and the last writer wins.  That is harmless.
"""

from __future__ import annotations

import time
from collections.abc import Callable

import httpx
import structlog

from availarr.domain.entities.endpoints import (
    ResolvedEndpoint,
    ServiceEndpointPair,
    strip_trailing_slashes,
)

log = structlog.get_logger(__name__)

DEFAULT_PROBE_TIMEOUT_SECONDS = 3.0
DEFAULT_CACHE_TTL_SECONDS = 300.0


class EndpointResolver:
    """Resolve which URL of a local/public pair to use.

    Implements ``EndpointResolverPort`` from domain.ports.endpoint_resolver.
    One instance is built at startup and injected wherever endpoints are
    resolved; its cache lives as long as the process.
    """

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        probe_timeout: float = DEFAULT_PROBE_TIMEOUT_SECONDS,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._http = http_client
        self._probe_timeout = probe_timeout
        self._ttl = ttl_seconds
        self._clock = clock
        self._cache: dict[tuple[str, str], ResolvedEndpoint] = {}

    # ------------------------------------------------------------------
    # Public API (EndpointResolverPort)
    # ------------------------------------------------------------------

    async def resolve(self, pair: ServiceEndpointPair) -> str:
        public_url = strip_trailing_slashes(pair.public_url)
        local_url = strip_trailing_slashes(pair.local_url)

        if not local_url:
            return public_url

        key = (local_url, public_url)
        cached = self._cache.get(key)
        if cached is not None and self._clock() < cached.expires_at:
            return cached.url

        reachable = await self.probe(local_url, pair.probe_path)
        resolved = ResolvedEndpoint(
            url=local_url if reachable else public_url,
            is_local=reachable,
            expires_at=self._clock() + self._ttl,
        )
        self._cache[key] = resolved
        log.info(
            "endpoint_resolved",
            url=resolved.url,
            is_local=resolved.is_local,
            ttl_seconds=self._ttl,
        )
        return resolved.url

    async def probe(self, url: str, probe_path: str) -> bool:
        """GET ``url + probe_path`` without credentials; never raises."""
        target = f"{strip_trailing_slashes(url)}{probe_path}"
        # Probes carry no credentials; the client is dedicated to probing.
        self._http.cookies.clear()
        try:
            resp = await self._http.get(
                target,
                headers={"Accept": "application/json"},
                timeout=self._probe_timeout,
                follow_redirects=False,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            log.debug("endpoint_probe_failed", url=target, error=repr(exc))
            return False
        if not resp.is_success:
            log.debug("endpoint_probe_rejected", url=target, status=resp.status_code)
            return False
        return True

    def is_using_local(self, pair: ServiceEndpointPair) -> bool:
        local_url = strip_trailing_slashes(pair.local_url)
        if not local_url:
            return False
        cached = self._cache.get((local_url, strip_trailing_slashes(pair.public_url)))
        return cached.is_local if cached is not None else False

    def invalidate(self) -> None:
        if self._cache:
            log.info("endpoint_cache_invalidated", entries=len(self._cache))
        self._cache.clear()

    def cached(self, pair: ServiceEndpointPair) -> ResolvedEndpoint | None:
        """Return the cache entry for *pair*, expired or not."""
        key = (
            strip_trailing_slashes(pair.local_url),
            strip_trailing_slashes(pair.public_url),
        )
        return self._cache.get(key)
