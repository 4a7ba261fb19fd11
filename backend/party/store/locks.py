"""Per-party serialization lanes."""

import asyncio
import weakref


class PartyLocks:
    """Hand out one asyncio.Lock per party id.

    Requests for the same party queue behind each other; different parties
    never contend. Locks are held weakly and disappear once no request is
    using or waiting on them, so probing random party ids does not grow
    the registry.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    def lock_for(self, party_id: str) -> asyncio.Lock:
        lock = self._locks.get(party_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[party_id] = lock
        return lock

    def __len__(self) -> int:
        return len(self._locks)
