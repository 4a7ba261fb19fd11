"""HTTP client for the access-code-gated player endpoints."""

from __future__ import annotations

from http import HTTPStatus
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from device.models import PlayerStateResponse

if TYPE_CHECKING:
    from collections.abc import Sequence

    import httpx


class DeviceApiError(Exception):
    """The server answered a player request with an error status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message

    @property
    def is_fatal(self) -> bool:
        """Wrong access code or unknown party: retrying cannot help."""
        return self.status_code in {HTTPStatus.FORBIDDEN, HTTPStatus.NOT_FOUND}


class PlayerApi:
    """Thin wrapper over ``httpx.AsyncClient``; the client's base_url points at the server."""

    def __init__(self, client: httpx.AsyncClient, party_id: str, access_code: str) -> None:
        self._client = client
        self._base_path = f"/api/parties/{quote(party_id, safe='')}/player"
        self._access_code = access_code

    async def state(self, acks: Sequence[str] = ()) -> PlayerStateResponse:
        data = await self._post("state", {"acks": list(acks)})
        return PlayerStateResponse.model_validate(data)

    async def advance(self, submission_id: str) -> None:
        await self._post("advance", {"submissionId": submission_id})

    async def previous(self) -> None:
        await self._post("previous", {})

    async def reset(self) -> None:
        await self._post("reset", {})

    async def _post(self, action: str, payload: dict[str, Any]) -> dict[str, Any]:
        response = await self._client.post(
            f"{self._base_path}/{action}",
            json={"accessCode": self._access_code, **payload},
        )
        try:
            data = response.json()
        except ValueError:
            data = {}
        if response.status_code >= HTTPStatus.BAD_REQUEST:
            message = data.get("error") if isinstance(data, dict) else None
            raise DeviceApiError(response.status_code, message or response.reason_phrase)
        return data if isinstance(data, dict) else {}
