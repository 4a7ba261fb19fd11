"""Party persistence: repository interface, implementations, and per-party locks."""

from party.store.file_repository import FilePartyRepository
from party.store.locks import PartyLocks
from party.store.memory_repository import InMemoryPartyRepository
from party.store.repository import PartyRepository

__all__ = [
    "FilePartyRepository",
    "InMemoryPartyRepository",
    "PartyLocks",
    "PartyRepository",
]
