"""Party lifecycle and membership endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import urlencode

from starlette.responses import JSONResponse

from party.auth.backend import request_token
from party.domain.capabilities import capabilities_for
from party.views.payloads import CreatePartyRequest, JoinPartyRequest, LoginRequest, parse_payload
from party.views.serializers import summarize_party, summarize_submission, summarize_user

if TYPE_CHECKING:
    from starlette.requests import Request

    from party.server.settings import PartyServerSettings
    from party.service import PartyService


def _service(request: Request) -> PartyService:
    return request.app.state.party_service


def join_url(request: Request, party_id: str) -> str:
    """Shareable link guests open to join, e.g. for a QR code."""
    settings: PartyServerSettings = request.app.state.settings
    base = settings.public_base_url
    if not base:
        proto = request.headers.get("x-forwarded-proto") or request.url.scheme
        host = request.headers.get("host") or request.url.netloc
        base = f"{proto}://{host}"
    return f"{base.rstrip('/')}{settings.join_path}?{urlencode({'partyId': party_id})}"


async def create_party(request: Request) -> JSONResponse:
    """POST /api/parties - create a party and its admin."""
    payload = await parse_payload(request, CreatePartyRequest)
    membership = await _service(request).create_party(payload.party_name, payload.display_name)
    party = membership.party
    return JSONResponse(
        {
            "party": {
                "id": party.id,
                "name": party.name,
                "joinUrl": join_url(request, party.id),
                "accessCode": party.access_code,
            },
            "user": summarize_user(membership.user),
            "authToken": membership.auth_token,
        },
        status_code=201,
    )


async def party_snapshot(request: Request) -> JSONResponse:
    """GET /api/parties/{party_id} - queue view, personalized when a token is presented."""
    party_id = request.path_params["party_id"]
    snapshot = await _service(request).snapshot(party_id, request_token(request))
    party = snapshot.party
    viewer = snapshot.viewer
    viewer_id = viewer.id if viewer is not None else None
    playback = snapshot.playback

    party_view = {**summarize_party(party), "joinUrl": join_url(request, party.id)}
    body: dict = {
        "party": party_view,
        "submissions": [summarize_submission(s, viewer_id) for s in playback.upcoming],
        "nowPlaying": summarize_submission(playback.current, viewer_id) if playback.current else None,
        "history": [summarize_submission(s, viewer_id) for s in playback.history],
        "pollIntervalMs": request.app.state.settings.poll_interval_ms,
    }
    if viewer is not None:
        body["user"] = summarize_user(viewer)
        body["remainingUploads"] = snapshot.remaining_uploads
        if capabilities_for(viewer).can_view_access_code:
            party_view["accessCode"] = party.access_code
    return JSONResponse(body)


async def join_party(request: Request) -> JSONResponse:
    """POST /api/parties/{party_id}/join - become a guest."""
    party_id = request.path_params["party_id"]
    payload = await parse_payload(request, JoinPartyRequest)
    membership = await _service(request).join(party_id, payload.display_name)
    return JSONResponse(
        {
            "party": {"id": membership.party.id, "name": membership.party.name},
            "user": summarize_user(membership.user),
            "authToken": membership.auth_token,
        },
        status_code=201,
    )


async def login(request: Request) -> JSONResponse:
    """POST /api/parties/{party_id}/login - revalidate a stored session token."""
    party_id = request.path_params["party_id"]
    payload = await parse_payload(request, LoginRequest)
    user = await _service(request).login(party_id, payload.auth_token)
    return JSONResponse({"user": summarize_user(user)})


async def end_party(request: Request) -> JSONResponse:
    """POST /api/parties/{party_id}/end - admin finalizes the party."""
    party_id = request.path_params["party_id"]
    party = await _service(request).end(party_id, request_token(request))
    return JSONResponse({"party": summarize_party(party)})
