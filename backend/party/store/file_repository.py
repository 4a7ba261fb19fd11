"""File-backed party repository storing every party in one JSON document."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from party.domain.errors import NotFoundError
from party.domain.models import Party
from party.store.repository import PartyRepository
from shared.storage import read_json, write_json_atomic

if TYPE_CHECKING:
    from pathlib import Path

logger = structlog.get_logger()

PARTY_NOT_FOUND_MESSAGE = "Party not found."


class FilePartyRepository(PartyRepository):
    """File-backed party repository.

    The document is ``{"parties": {party_id: <party>}}``. It is loaded into
    memory as serialized dicts on first access and rewritten atomically on
    every save. An internal asyncio.Lock guards the document itself; the
    per-party read-modify-write sequence is serialized by the caller.

    Limitation: single process only. Multiple server processes sharing the
    file would overwrite each other's writes.
    """

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._parties: dict[str, dict[str, Any]] = {}
        self._lock = asyncio.Lock()
        self._loaded = False

    async def _ensure_loaded(self) -> None:
        async with self._lock:
            if self._loaded:
                return
            self._load_from_file()
            self._loaded = True

    def _load_from_file(self) -> None:
        """Read the document, starting empty when the file does not exist yet.

        An existing file that cannot be parsed raises OSError instead of
        being silently replaced.
        """
        data = read_json(self._file_path)
        if data is None:
            self._parties = {}
            return
        if not isinstance(data, dict) or not isinstance(data.get("parties", {}), dict):
            msg = f"Expected {{'parties': {{...}}}} at root in {self._file_path}"
            raise OSError(msg)
        self._parties = dict(data.get("parties", {}))
        logger.info("party store loaded", path=str(self._file_path), parties=len(self._parties))

    def _write(self) -> None:
        write_json_atomic(self._file_path, {"parties": self._parties})

    async def create(self, party: Party) -> None:
        await self._ensure_loaded()
        async with self._lock:
            if party.id in self._parties:
                raise ValueError(f"Party with id '{party.id}' already exists")
            self._parties[party.id] = party.model_dump(mode="json")
            try:
                self._write()
            except OSError:
                del self._parties[party.id]
                raise

    async def load(self, party_id: str) -> Party:
        await self._ensure_loaded()
        raw = self._parties.get(party_id)
        if raw is None:
            raise NotFoundError(PARTY_NOT_FOUND_MESSAGE)
        try:
            return Party.model_validate(raw)
        except PydanticValidationError as exc:
            msg = f"Corrupt party record '{party_id}' in {self._file_path}"
            raise OSError(msg) from exc

    async def save(self, party: Party) -> None:
        await self._ensure_loaded()
        async with self._lock:
            previous = self._parties.get(party.id)
            self._parties[party.id] = party.model_dump(mode="json")
            try:
                self._write()
            except OSError:
                if previous is None:
                    self._parties.pop(party.id, None)
                else:
                    self._parties[party.id] = previous
                raise
