"""Queue ranking: submissions to a deterministic play order."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from party.domain.models import Submission


def _sort_key(submission: Submission) -> tuple[bool, int, int, datetime]:
    # unplayed first, then newest promotion, then score, then FIFO
    return (submission.played, -submission.priority, -submission.score, submission.created_at)


def rank(submissions: Iterable[Submission]) -> list[Submission]:
    """Return submissions in play order.

    ``sorted`` is stable, so entries that tie on every key keep their
    submission (insertion) order.
    """
    return sorted(submissions, key=_sort_key)


def next_priority(submissions: Iterable[Submission], now_ms: int) -> int:
    """Priority value for a promotion happening at ``now_ms``.

    Wall-clock milliseconds, bumped past the highest existing priority so
    the latest promotion always wins even within a single clock tick.
    """
    highest = max((s.priority for s in submissions), default=0)
    return max(now_ms, highest + 1)
