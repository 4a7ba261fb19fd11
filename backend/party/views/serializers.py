"""JSON views of domain objects, personalized per viewer."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from datetime import datetime

    from party.domain.models import Command, Party, Submission, User


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def summarize_submission(submission: Submission, viewer_id: str | None = None) -> dict[str, Any]:
    return {
        "id": submission.id,
        "url": submission.url,
        "videoId": submission.video_id,
        "title": submission.title,
        "channel": submission.channel,
        "thumbnail": submission.thumbnail,
        "submittedAt": _iso(submission.created_at),
        "submittedBy": submission.user_name,
        "submittedById": submission.user_id,
        "played": submission.played,
        "playedAt": _iso(submission.played_at),
        "priority": submission.priority,
        "upvotes": submission.upvotes,
        "downvotes": submission.downvotes,
        "score": submission.score,
        "viewerVote": submission.vote_of(viewer_id),
    }


def summarize_user(user: User) -> dict[str, Any]:
    return {"id": user.id, "name": user.name, "role": user.role.value}


def summarize_command(command: Command) -> dict[str, Any]:
    return {"id": command.id, "action": command.action.value, "createdAt": _iso(command.created_at)}


def summarize_party(party: Party) -> dict[str, Any]:
    return {
        "id": party.id,
        "name": party.name,
        "createdAt": _iso(party.created_at),
        "endedAt": _iso(party.ended_at),
    }
