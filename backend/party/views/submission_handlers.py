"""Track submission, voting and admin queue endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.responses import JSONResponse

from party.auth.backend import request_token
from party.views.payloads import SubmitTrackRequest, VoteRequest, parse_payload
from party.views.serializers import summarize_submission

if TYPE_CHECKING:
    from starlette.requests import Request

    from party.domain.models import Submission, User
    from party.service import PartyService


def _service(request: Request) -> PartyService:
    return request.app.state.party_service


def _submission_response(submission: Submission, viewer: User, status_code: int = 200) -> JSONResponse:
    return JSONResponse({"submission": summarize_submission(submission, viewer.id)}, status_code=status_code)


async def submit_track(request: Request) -> JSONResponse:
    """POST /api/parties/{party_id}/videos"""
    payload = await parse_payload(request, SubmitTrackRequest)
    submission, viewer = await _service(request).submit(
        request.path_params["party_id"],
        request_token(request),
        payload.url,
    )
    return _submission_response(submission, viewer, status_code=201)


async def remove_track(request: Request) -> JSONResponse:
    """DELETE /api/parties/{party_id}/videos/{submission_id}"""
    await _service(request).remove(
        request.path_params["party_id"],
        request_token(request),
        request.path_params["submission_id"],
    )
    return JSONResponse({"success": True})


async def vote_track(request: Request) -> JSONResponse:
    """POST /api/parties/{party_id}/videos/{submission_id}/vote"""
    payload = await parse_payload(request, VoteRequest)
    submission, viewer = await _service(request).vote(
        request.path_params["party_id"],
        request_token(request),
        request.path_params["submission_id"],
        payload.value,
    )
    return _submission_response(submission, viewer)


async def promote_track(request: Request) -> JSONResponse:
    submission, viewer = await _service(request).promote(
        request.path_params["party_id"],
        request_token(request),
        request.path_params["submission_id"],
    )
    return _submission_response(submission, viewer)


async def mark_track_played(request: Request) -> JSONResponse:
    submission, viewer = await _service(request).mark_played(
        request.path_params["party_id"],
        request_token(request),
        request.path_params["submission_id"],
    )
    return _submission_response(submission, viewer)


async def reset_track_priority(request: Request) -> JSONResponse:
    submission, viewer = await _service(request).reset_priority(
        request.path_params["party_id"],
        request_token(request),
        request.path_params["submission_id"],
    )
    return _submission_response(submission, viewer)
