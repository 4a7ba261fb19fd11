"""Bounded memory of executed command ids."""

DEFAULT_HANDLED_CAPACITY = 256


class HandledCommands:
    """Insertion-ordered id set that forgets its oldest entries past ``capacity``.

    The server caps a party's pending commands well below the default
    capacity, so an id can only be forgotten after it has left the server's
    outbox and can no longer be redelivered.
    """

    def __init__(self, capacity: int = DEFAULT_HANDLED_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._ids: dict[str, None] = {}

    def mark(self, command_id: str) -> bool:
        """Record ``command_id``. Returns True the first time it is seen."""
        if command_id in self._ids:
            return False
        self._ids[command_id] = None
        while len(self._ids) > self._capacity:
            del self._ids[next(iter(self._ids))]
        return True

    def __contains__(self, command_id: object) -> bool:
        return command_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)
