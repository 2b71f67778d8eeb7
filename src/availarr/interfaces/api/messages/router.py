"""Message endpoint: one POST route dispatching on the message type."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, cast

import structlog
from fastapi import APIRouter, Request
from pydantic import ValidationError

from availarr.interfaces.api.messages import presenter
from availarr.interfaces.api.messages.schemas import (
    ConfigPayload,
    ConnectionTestPayload,
    MediaPayload,
    MessageEnvelope,
    SearchPayload,
)
from availarr.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(tags=["messages"])

Handler = Callable[[AppState, dict[str, Any]], Awaitable[dict[str, Any]]]


async def _check_media(state: AppState, payload: dict[str, Any]) -> dict[str, Any]:
    media = MediaPayload.model_validate(payload).to_detected()
    result = await state.orchestrator.check_availability(media)
    server_type = state.config_provider.get().media_server.server_type
    return presenter.render_availability(result, server_type)


async def _request_media(state: AppState, payload: dict[str, Any]) -> dict[str, Any]:
    body = MediaPayload.model_validate(payload)
    result = await state.orchestrator.submit_request(
        body.to_detected(), provider_id=body.tmdb_id
    )
    return presenter.render_request(result)


async def _search_media(state: AppState, payload: dict[str, Any]) -> dict[str, Any]:
    body = SearchPayload.model_validate(payload)
    result = await state.orchestrator.search_and_enrich(
        body.query, media_type=body.media_type, year=body.year
    )
    return presenter.render_search(result)


async def _test_connection(state: AppState, payload: dict[str, Any]) -> dict[str, Any]:
    body = ConnectionTestPayload.model_validate(payload)
    result = await state.orchestrator.test_connection(body.service)
    return presenter.render_connection_test(result)


async def _get_config(state: AppState, payload: dict[str, Any]) -> dict[str, Any]:
    return presenter.render_config(state.config_provider.get())


async def _save_config(state: AppState, payload: dict[str, Any]) -> dict[str, Any]:
    settings = ConfigPayload.model_validate(payload).to_settings()
    state.config_provider.save(settings)
    return presenter.message("SAVE_CONFIG_RESPONSE", {"success": True})


_HANDLERS: dict[str, Handler] = {
    "CHECK_MEDIA": _check_media,
    "REQUEST_MEDIA": _request_media,
    "SEARCH_MEDIA": _search_media,
    "TEST_CONNECTION": _test_connection,
    "GET_CONFIG": _get_config,
    "SAVE_CONFIG": _save_config,
}


@router.post("/messages")
async def handle_message(request: Request, envelope: MessageEnvelope) -> dict[str, Any]:
    state = cast(AppState, request.app.state)

    handler = _HANDLERS.get(envelope.type)
    if handler is None:
        log.warning("message_unknown_type", type=envelope.type)
        return presenter.error_message(f"Unknown message type: {envelope.type}")

    try:
        return await handler(state, envelope.payload)
    except ValidationError as exc:
        log.info("message_invalid_payload", type=envelope.type, errors=exc.error_count())
        return presenter.error_message(f"Invalid {envelope.type} payload: {exc}")
    except Exception as exc:
        log.exception("message_handler_failed", type=envelope.type)
        return presenter.error_message(str(exc) or type(exc).__name__)
