"""Mapping of request-service media status codes to canonical states.

This table is the only place where upstream status codes are interpreted.
"""

from __future__ import annotations

from availarr.domain.entities.availability import AvailabilityStatus

_REMOTE_STATUS_TABLE: dict[int, AvailabilityStatus] = {
    0: AvailabilityStatus.NOT_REQUESTED,
    1: AvailabilityStatus.UNKNOWN,
    2: AvailabilityStatus.PENDING,
    3: AvailabilityStatus.PROCESSING,
    4: AvailabilityStatus.PARTIAL,
    5: AvailabilityStatus.AVAILABLE,
}


def map_media_status(code: object) -> AvailabilityStatus:
    """Map ``mediaInfo.status`` (``None`` when mediaInfo is absent).

    Unknown codes and non-integer values map to ``not_requested``.
    """
    # bool is an int subclass; True must not read as 1.
    if not isinstance(code, int) or isinstance(code, bool):
        return AvailabilityStatus.NOT_REQUESTED
    return _REMOTE_STATUS_TABLE.get(code, AvailabilityStatus.NOT_REQUESTED)
