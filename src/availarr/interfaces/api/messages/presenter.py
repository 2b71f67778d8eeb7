"""Render orchestrator results as message-protocol responses.

Keys are camelCase and optional keys are omitted when empty, matching what
the browser extension reads.
"""

from __future__ import annotations

from typing import Any

from availarr.domain.entities import (
    Availability,
    ConnectionTestOutcome,
    EnrichedSearchResult,
    RequestOutcome,
    SearchOutcome,
    ServiceSettings,
)


def _compact(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


def message(type_: str, payload: dict[str, Any]) -> dict[str, Any]:
    return {"type": type_, "payload": payload}


def error_message(text: str) -> dict[str, Any]:
    return message("ERROR", {"message": text})


def render_availability(result: Availability, server_type: str) -> dict[str, Any]:
    return message(
        "CHECK_MEDIA_RESPONSE",
        _compact(
            {
                "status": result.status.value,
                "serverType": server_type,
                "itemId": result.item_id,
                "itemUrl": result.item_url,
                "details": result.details,
                "error": result.message,
            }
        ),
    )


def render_request(result: RequestOutcome) -> dict[str, Any]:
    return message(
        "REQUEST_MEDIA_RESPONSE",
        _compact(
            {
                "success": result.success,
                "message": result.message,
                "errorKind": result.error_kind,
            }
        ),
    )


def _render_search_item(item: EnrichedSearchResult) -> dict[str, Any]:
    return _compact(
        {
            "id": item.id,
            "title": item.title,
            "mediaType": item.media_type,
            "status": item.status.value,
            "year": item.year,
            "overview": item.overview,
            "posterUrl": item.poster_url,
            "serverUrl": item.server_url,
            "serverItemUrl": item.server_item_url,
        }
    )


def render_search(result: SearchOutcome) -> dict[str, Any]:
    return message(
        "SEARCH_MEDIA_RESPONSE",
        _compact(
            {
                "results": [_render_search_item(r) for r in result.results],
                "requestServiceEnabled": result.request_service_enabled,
                "serverType": result.server_type,
                "requestServiceUrl": result.request_service_url,
                "serverUrl": result.server_url,
                "error": result.error,
            }
        ),
    )


def render_connection_test(result: ConnectionTestOutcome) -> dict[str, Any]:
    return message(
        "TEST_CONNECTION_RESPONSE",
        _compact(
            {"success": result.success, "url": result.url, "isLocal": result.is_local}
        ),
    )


def render_config(settings: ServiceSettings) -> dict[str, Any]:
    ms = settings.media_server
    rs = settings.request_service
    return message(
        "CONFIG",
        {
            "mediaServer": {
                "serverType": ms.server_type,
                "url": ms.url,
                "localUrl": ms.local_url,
                "apiKey": ms.api_key,
            },
            "requestService": {
                "enabled": rs.enabled,
                "url": rs.url,
                "localUrl": rs.local_url,
                "apiKey": rs.api_key,
            },
        },
    )
