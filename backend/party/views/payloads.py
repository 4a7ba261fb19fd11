"""Typed request bodies for the party HTTP API."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from party.domain.errors import ValidationError
from party.domain.models import PlayerAction

if TYPE_CHECKING:
    from typing import Any

    from starlette.requests import Request

_MAX_ACKS = 500

PayloadT = TypeVar("PayloadT", bound=BaseModel)


class _Payload(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class CreatePartyRequest(_Payload):
    party_name: str = Field(default="", alias="partyName", max_length=120)
    display_name: str = Field(default="", alias="displayName", max_length=60)


class JoinPartyRequest(_Payload):
    display_name: str = Field(default="", alias="displayName", max_length=60)


class LoginRequest(_Payload):
    auth_token: str = Field(default="", alias="authToken")


class SubmitTrackRequest(_Payload):
    url: str = Field(default="", max_length=2048)


class VoteRequest(_Payload):
    value: int


class PlayerControlRequest(_Payload):
    action: PlayerAction


class DeviceRequest(_Payload):
    access_code: str = Field(default="", alias="accessCode")


class PlayerStateRequest(DeviceRequest):
    acks: list[str] = Field(default_factory=list, max_length=_MAX_ACKS)


class AdvanceRequest(DeviceRequest):
    submission_id: str | None = Field(default=None, alias="submissionId")


async def read_json_body(request: Request) -> dict[str, Any]:
    """Read the request body as a JSON object. An empty body reads as ``{}``."""
    max_bytes: int = request.app.state.settings.max_body_bytes
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > max_bytes:
        raise ValidationError("Payload too large")

    raw = await request.body()
    if len(raw) > max_bytes:
        raise ValidationError("Payload too large")
    if not raw.strip():
        return {}
    try:
        body = json.loads(raw)
    except ValueError as e:
        raise ValidationError("Invalid JSON body") from e
    if not isinstance(body, dict):
        raise ValidationError("JSON body must be an object")
    return body


async def parse_payload(request: Request, model: type[PayloadT]) -> PayloadT:
    body = await read_json_body(request)
    try:
        return model.model_validate(body)
    except PydanticValidationError as e:
        raise ValidationError(_describe(e)) from e


def _describe(exc: PydanticValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    if location:
        return f"{location}: {first['msg']}"
    return first["msg"]
