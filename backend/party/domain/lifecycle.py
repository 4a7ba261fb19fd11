"""Party lifecycle: active -> ended, one way."""

from __future__ import annotations

from typing import TYPE_CHECKING

from party.domain.errors import ConflictError, GoneError

if TYPE_CHECKING:
    from datetime import datetime

    from party.domain.models import Party

PARTY_ENDED_MESSAGE = "This party has already ended."


def ensure_active(party: Party) -> None:
    """Raise ConflictError if the party no longer accepts mutation."""
    if party.is_ended:
        raise ConflictError(PARTY_ENDED_MESSAGE)


def ensure_joinable(party: Party) -> None:
    if party.is_ended:
        raise GoneError(PARTY_ENDED_MESSAGE)


def finalize(party: Party, now: datetime) -> bool:
    """End the party. Returns False when it had already ended.

    Clears the pointer, marks every unplayed track played at ``now`` and
    records each in the history stack once.
    """
    if party.is_ended:
        return False

    party.ended_at = now
    party.current_submission_id = None
    for submission in party.submissions:
        if not submission.played:
            submission.played = True
            submission.played_at = now
            party.push_history(submission.id)
    return True
