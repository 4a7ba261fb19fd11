"""Party aggregate and the entities it owns."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 - pydantic needs the runtime type
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Role(StrEnum):
    ADMIN = "admin"
    GUEST = "guest"


class PlayerAction(StrEnum):
    PLAY = "play"
    PAUSE = "pause"
    RESTART = "restart"


class User(BaseModel):
    """Party member. Role never changes after creation."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    role: Role
    joined_at: datetime


class Submission(BaseModel):
    """One queued track plus its votes and play status."""

    id: str
    url: str
    video_id: str
    title: str
    channel: str
    thumbnail: str
    created_at: datetime
    user_id: str
    user_name: str
    votes: dict[str, Literal[-1, 1]] = Field(default_factory=dict)  # user_id -> vote
    played: bool = False
    played_at: datetime | None = None
    priority: int = 0

    @property
    def score(self) -> int:
        return sum(self.votes.values())

    @property
    def upvotes(self) -> int:
        return sum(1 for v in self.votes.values() if v == 1)

    @property
    def downvotes(self) -> int:
        return sum(1 for v in self.votes.values() if v == -1)

    def vote_of(self, user_id: str | None) -> int:
        if user_id is None:
            return 0
        return self.votes.get(user_id, 0)


class Party(BaseModel):
    """Aggregate root: one shared queue session.

    Persisted whole on every write. ``history`` is the chronological play
    stack used for "previous"; ``current_submission_id`` is a cached pointer
    that the playback resolver keeps consistent with the ranking.
    """

    id: str
    name: str
    access_code: str
    created_at: datetime
    ended_at: datetime | None = None
    current_submission_id: str | None = None
    history: list[str] = Field(default_factory=list)
    users: dict[str, User] = Field(default_factory=dict)
    tokens: dict[str, str] = Field(default_factory=dict)  # auth token -> user_id
    submissions: list[Submission] = Field(default_factory=list)

    @property
    def is_ended(self) -> bool:
        return self.ended_at is not None

    def find_submission(self, submission_id: str) -> Submission | None:
        return next((s for s in self.submissions if s.id == submission_id), None)

    def user_for_token(self, token: str | None) -> User | None:
        if not token:
            return None
        user_id = self.tokens.get(token)
        if user_id is None:
            return None
        return self.users.get(user_id)

    def active_submission_count(self, user_id: str) -> int:
        """Number of unplayed tracks the user currently has queued."""
        return sum(1 for s in self.submissions if not s.played and s.user_id == user_id)

    def push_history(self, submission_id: str) -> None:
        if submission_id not in self.history:
            self.history.append(submission_id)


class Command(BaseModel):
    """Ephemeral playback directive from an admin to the playback device."""

    model_config = ConfigDict(frozen=True)

    id: str
    action: PlayerAction
    created_at: datetime
