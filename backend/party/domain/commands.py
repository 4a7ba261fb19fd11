"""Per-party outbox of pending playback commands.

Commands are transport artifacts, not domain facts: they live in memory
next to the party locks and are never written to the party store. The
device acknowledges executed ids on its next poll; unacknowledged commands
are re-sent on every poll (at-least-once), and the device deduplicates by id.

Callers must hold the party's lock while touching its outbox.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from party.domain.models import Command

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from datetime import datetime

    from party.domain.models import PlayerAction

logger = structlog.get_logger()

# Hard ceiling so an abandoned device cannot grow a party's outbox forever.
MAX_PENDING_COMMANDS = 100


class CommandOutbox:
    def __init__(self, id_factory: Callable[[], str], max_pending: int = MAX_PENDING_COMMANDS) -> None:
        self._pending: dict[str, list[Command]] = {}  # party_id -> commands, oldest first
        self._id_factory = id_factory
        self._max_pending = max_pending

    def enqueue(self, party_id: str, action: PlayerAction, now: datetime) -> Command:
        """Append a new command. Identical actions each get their own id."""
        command = Command(id=self._id_factory(), action=action, created_at=now)
        pending = self._pending.setdefault(party_id, [])
        pending.append(command)
        if len(pending) > self._max_pending:
            dropped = pending.pop(0)
            logger.warning("command outbox full, dropped oldest", command_id=dropped.id)
        return command

    def acknowledge(self, party_id: str, command_ids: Iterable[str]) -> int:
        """Remove exactly the acknowledged ids. Unknown ids are ignored."""
        acked = set(command_ids)
        pending = self._pending.get(party_id)
        if not pending or not acked:
            return 0
        remaining = [c for c in pending if c.id not in acked]
        removed = len(pending) - len(remaining)
        if remaining:
            self._pending[party_id] = remaining
        else:
            del self._pending[party_id]
        return removed

    def pending(self, party_id: str) -> list[Command]:
        return list(self._pending.get(party_id, ()))

    def drop(self, party_id: str) -> int:
        """Discard every pending command for the party."""
        return len(self._pending.pop(party_id, ()))
