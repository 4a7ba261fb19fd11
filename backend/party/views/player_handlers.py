"""Playback endpoints: admin control and the access-code-gated device."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.responses import JSONResponse

from party.auth.backend import request_token
from party.views.payloads import AdvanceRequest, DeviceRequest, PlayerControlRequest, PlayerStateRequest, parse_payload
from party.views.serializers import summarize_command, summarize_submission

if TYPE_CHECKING:
    from starlette.requests import Request

    from party.service import PartyService


def _service(request: Request) -> PartyService:
    return request.app.state.party_service


async def player_control(request: Request) -> JSONResponse:
    """POST /api/parties/{party_id}/player/control - admin queues a command for the device."""
    payload = await parse_payload(request, PlayerControlRequest)
    command = await _service(request).send_command(
        request.path_params["party_id"],
        request_token(request),
        payload.action,
    )
    return JSONResponse({"command": summarize_command(command)}, status_code=201)


async def player_state(request: Request) -> JSONResponse:
    """POST /api/parties/{party_id}/player/state - device poll with acknowledgements."""
    payload = await parse_payload(request, PlayerStateRequest)
    state = await _service(request).player_state(
        request.path_params["party_id"],
        payload.access_code,
        payload.acks,
    )
    party = state.party
    return JSONResponse(
        {
            "party": {
                "id": party.id,
                "name": party.name,
                "endedAt": party.ended_at.isoformat() if party.ended_at else None,
            },
            "nowPlaying": summarize_submission(state.now_playing) if state.now_playing else None,
            "upcoming": [summarize_submission(s) for s in state.upcoming],
            "history": [summarize_submission(s) for s in state.history],
            "canGoPrevious": state.can_go_previous,
            "commands": [summarize_command(c) for c in state.commands],
            "pollIntervalMs": request.app.state.settings.poll_interval_ms,
        },
    )


async def player_advance(request: Request) -> JSONResponse:
    """POST /api/parties/{party_id}/player/advance"""
    payload = await parse_payload(request, AdvanceRequest)
    await _service(request).advance(request.path_params["party_id"], payload.access_code, payload.submission_id)
    return JSONResponse({"success": True})


async def player_previous(request: Request) -> JSONResponse:
    """POST /api/parties/{party_id}/player/previous"""
    payload = await parse_payload(request, DeviceRequest)
    submission = await _service(request).previous(request.path_params["party_id"], payload.access_code)
    return JSONResponse({"submission": summarize_submission(submission)})


async def player_reset(request: Request) -> JSONResponse:
    """POST /api/parties/{party_id}/player/reset"""
    payload = await parse_payload(request, DeviceRequest)
    await _service(request).reset(request.path_params["party_id"], payload.access_code)
    return JSONResponse({"success": True})
