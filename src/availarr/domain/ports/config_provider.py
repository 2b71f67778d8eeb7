"""Port for the live connection settings."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from availarr.domain.entities.endpoints import ServiceSettings


@runtime_checkable
class ConfigProviderPort(Protocol):
    def get(self) -> ServiceSettings:
        """Current settings snapshot (read at the start of every operation)."""
        ...

    def save(self, settings: ServiceSettings) -> None:
        """Replace the settings and notify change listeners."""
        ...
