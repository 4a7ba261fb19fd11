from datetime import UTC, datetime, timedelta

from party.domain.models import Submission
from party.domain.ranking import next_priority, rank

T0 = datetime(2025, 6, 1, 20, 0, tzinfo=UTC)


def _submission(sid: str, *, minute: int = 0, votes=None, priority: int = 0, played: bool = False) -> Submission:
    return Submission(
        id=sid,
        url=f"https://www.youtube.com/watch?v={sid}",
        video_id=sid,
        title=sid,
        channel="",
        thumbnail="",
        created_at=T0 + timedelta(minutes=minute),
        user_id="usr_1",
        user_name="Ava",
        votes=votes or {},
        played=played,
        priority=priority,
    )


def _ids(submissions):
    return [s.id for s in submissions]


class TestRank:
    def test_unplayed_before_played_regardless_of_score(self):
        played = _submission("a", votes={"u1": 1, "u2": 1, "u3": 1}, played=True)
        unplayed = _submission("b", minute=1, votes={"u1": -1})

        assert _ids(rank([played, unplayed])) == ["b", "a"]

    def test_priority_outranks_score(self):
        popular = _submission("a", votes={"u1": 1, "u2": 1})
        promoted = _submission("b", minute=1, priority=5)

        assert _ids(rank([popular, promoted])) == ["b", "a"]

    def test_higher_priority_first(self):
        older = _submission("a", priority=10)
        newer = _submission("b", priority=20)

        assert _ids(rank([older, newer])) == ["b", "a"]

    def test_score_descending(self):
        low = _submission("a", votes={"u1": -1})
        high = _submission("b", minute=1, votes={"u1": 1})
        zero = _submission("c", minute=2)

        assert _ids(rank([low, high, zero])) == ["b", "c", "a"]

    def test_fifo_on_equal_score(self):
        late = _submission("a", minute=5)
        early = _submission("b", minute=1)

        assert _ids(rank([late, early])) == ["b", "a"]

    def test_full_ties_keep_insertion_order(self):
        subs = [_submission(sid) for sid in ("x", "y", "z")]

        assert _ids(rank(subs)) == ["x", "y", "z"]

    def test_deterministic_on_repeat(self):
        subs = [
            _submission("a", votes={"u1": 1}),
            _submission("b", priority=3, played=True),
            _submission("c", minute=2),
            _submission("d", minute=1, priority=7),
        ]

        assert _ids(rank(subs)) == _ids(rank(subs)) == ["d", "a", "c", "b"]

    def test_does_not_mutate_input(self):
        subs = [_submission("a", minute=2), _submission("b", minute=1)]

        rank(subs)

        assert _ids(subs) == ["a", "b"]


class TestNextPriority:
    def test_uses_clock_when_no_priorities(self):
        assert next_priority([_submission("a")], 1_000) == 1_000

    def test_bumps_past_highest_existing(self):
        subs = [_submission("a", priority=1_000)]

        assert next_priority(subs, 1_000) == 1_001
        assert next_priority(subs, 999) == 1_001

    def test_later_promotion_in_same_tick_wins(self):
        a = _submission("a")
        b = _submission("b", minute=1)
        b.priority = next_priority([a, b], 5_000)
        a.priority = next_priority([a, b], 5_000)

        assert _ids(rank([a, b])) == ["a", "b"]
