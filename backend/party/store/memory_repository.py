"""In-memory party repository for tests and throwaway deployments."""

from typing import Any

from party.domain.errors import NotFoundError
from party.domain.models import Party
from party.store.file_repository import PARTY_NOT_FOUND_MESSAGE
from party.store.repository import PartyRepository


class InMemoryPartyRepository(PartyRepository):
    """Keeps serialized snapshots so loads never alias stored state."""

    def __init__(self) -> None:
        self._parties: dict[str, dict[str, Any]] = {}

    async def create(self, party: Party) -> None:
        if party.id in self._parties:
            raise ValueError(f"Party with id '{party.id}' already exists")
        self._parties[party.id] = party.model_dump(mode="json")

    async def load(self, party_id: str) -> Party:
        raw = self._parties.get(party_id)
        if raw is None:
            raise NotFoundError(PARTY_NOT_FOUND_MESSAGE)
        return Party.model_validate(raw)

    async def save(self, party: Party) -> None:
        self._parties[party.id] = party.model_dump(mode="json")
