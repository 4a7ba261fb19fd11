"""Playback resolver: now playing, upcoming and played views.

This is the only place the current-track pointer is healed. Every read and
every mutating operation passes the party through ``resolve`` before
responding, and persists only when ``mutated`` is set.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from party.domain.ranking import rank

if TYPE_CHECKING:
    from party.domain.models import Party, Submission


@dataclass(frozen=True)
class PlaybackState:
    current: Submission | None
    upcoming: list[Submission]
    history: list[Submission]
    mutated: bool


def resolve(party: Party) -> PlaybackState:
    """Derive playback views from the party, fixing the pointer in place.

    A pointer to a missing or already-played submission is cleared; an empty
    pointer is set to the first unplayed track in ranked order.
    """
    queue = rank(party.submissions)
    mutated = False
    current: Submission | None = None

    if party.current_submission_id is not None:
        current = next((s for s in queue if s.id == party.current_submission_id), None)
        if current is None or current.played:
            party.current_submission_id = None
            current = None
            mutated = True

    if current is None:
        current = next((s for s in queue if not s.played), None)
        if current is not None and party.current_submission_id != current.id:
            party.current_submission_id = current.id
            mutated = True

    upcoming = [s for s in queue if not s.played and (current is None or s.id != current.id)]
    played = [s for s in queue if s.played]
    return PlaybackState(current=current, upcoming=upcoming, history=played, mutated=mutated)
