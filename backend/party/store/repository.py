"""Abstract interface for party persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from party.domain.models import Party


class PartyRepository(ABC):
    """Whole-aggregate store keyed by party id.

    ``load`` must return an object the caller may mutate freely: nothing
    reaches storage until ``save`` is called. There is no optimistic
    concurrency check, so callers serialize load/save per party
    (see PartyLocks).
    """

    @abstractmethod
    async def create(self, party: Party) -> None: ...

    @abstractmethod
    async def load(self, party_id: str) -> Party: ...

    @abstractmethod
    async def save(self, party: Party) -> None: ...
