"""In-memory holder of the live connection settings."""

from __future__ import annotations

from collections.abc import Callable

import structlog

from availarr.domain.entities.endpoints import ServiceSettings

log = structlog.get_logger(__name__)

SettingsListener = Callable[[ServiceSettings], None]


class InMemoryConfigProvider:
    """Implements ``ConfigProviderPort``.

    ``save()`` swaps the snapshot and notifies every listener, in
    registration order.  The endpoint resolver registers its cache
    invalidation here so a settings change never reuses a stale probe.
    """

    def __init__(
        self,
        settings: ServiceSettings | None = None,
        listeners: list[SettingsListener] | None = None,
    ) -> None:
        self._settings = settings or ServiceSettings()
        self._listeners: list[SettingsListener] = list(listeners or [])

    def get(self) -> ServiceSettings:
        return self._settings

    def save(self, settings: ServiceSettings) -> None:
        self._settings = settings
        log.info(
            "settings_saved",
            server_type=settings.media_server.server_type,
            media_server_configured=settings.media_server.configured,
            request_service_enabled=settings.request_service.enabled,
        )
        for listener in self._listeners:
            listener(settings)

    def add_listener(self, listener: SettingsListener) -> None:
        self._listeners.append(listener)
