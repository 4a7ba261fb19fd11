"""Party operations.

Every operation runs inside the party's lock as one unit:
load -> authorize -> single transition -> resolve playback -> save.
Reads save only when the playback resolver healed the pointer.
"""

from __future__ import annotations

import contextlib
import hmac
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog

from party.domain.capabilities import can_remove, require
from party.domain.commands import CommandOutbox
from party.domain.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    QuotaExceededError,
    ValidationError,
)
from party.domain.lifecycle import ensure_active, ensure_joinable, finalize
from party.domain.links import canonical_watch_url, extract_video_id
from party.domain.models import Party, Role, Submission, User
from party.domain.playback import PlaybackState, resolve
from party.domain.ranking import next_priority
from party.ids import generate_access_code, generate_id
from party.metadata import with_placeholders
from party.store.locks import PartyLocks

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable, Iterable

    from party.domain.models import Command, PlayerAction
    from party.metadata import MetadataClient
    from party.store.repository import PartyRepository

logger = structlog.get_logger()

DEFAULT_MAX_ACTIVE_SUBMISSIONS = 3

TRACK_NOT_FOUND_MESSAGE = "Track not found."
INVALID_ACCESS_CODE_MESSAGE = "Invalid access code."
VALID_VOTES = (-1, 0, 1)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(frozen=True)
class Membership:
    """A freshly created session: the party, the user, and their bearer token."""

    party: Party
    user: User
    auth_token: str


@dataclass(frozen=True)
class PartySnapshot:
    party: Party
    playback: PlaybackState
    viewer: User | None
    remaining_uploads: int | None


@dataclass(frozen=True)
class PlayerState:
    party: Party
    now_playing: Submission | None
    upcoming: list[Submission]
    history: list[Submission]
    can_go_previous: bool
    commands: list[Command]


class PartyService:
    def __init__(
        self,
        repository: PartyRepository,
        metadata: MetadataClient,
        *,
        outbox: CommandOutbox | None = None,
        locks: PartyLocks | None = None,
        clock: Callable[[], datetime] = _utcnow,
        max_active_submissions: int = DEFAULT_MAX_ACTIVE_SUBMISSIONS,
    ) -> None:
        self._repository = repository
        self._metadata = metadata
        self._outbox = outbox or CommandOutbox(id_factory=lambda: generate_id("cmd"))
        self._locks = locks or PartyLocks()
        self._clock = clock
        self._max_active_submissions = max_active_submissions

    # -- lifecycle and membership --

    async def create_party(self, party_name: str, display_name: str) -> Membership:
        party_name = party_name.strip()
        display_name = display_name.strip()
        if not party_name or not display_name:
            raise ValidationError("Party name and display name are required.")

        now = self._clock()
        admin = User(id=generate_id("usr"), name=display_name, role=Role.ADMIN, joined_at=now)
        token = generate_id("tok")
        party = Party(
            id=generate_id("pty"),
            name=party_name,
            access_code=generate_access_code(),
            created_at=now,
            users={admin.id: admin},
            tokens={token: admin.id},
        )
        await self._repository.create(party)
        logger.info("party created", party_id=party.id, user_id=admin.id)
        return Membership(party=party, user=admin, auth_token=token)

    async def join(self, party_id: str, display_name: str) -> Membership:
        async with self._locked(party_id) as party:
            ensure_joinable(party)
            display_name = display_name.strip()
            if not display_name:
                raise ValidationError("Display name is required.")

            guest = User(id=generate_id("usr"), name=display_name, role=Role.GUEST, joined_at=self._clock())
            token = generate_id("tok")
            party.users[guest.id] = guest
            party.tokens[token] = guest.id
            await self._repository.save(party)
        logger.info("guest joined", party_id=party_id, user_id=guest.id)
        return Membership(party=party, user=guest, auth_token=token)

    async def login(self, party_id: str, auth_token: str) -> User:
        """Revalidate a client-held token against the party's token map."""
        if not auth_token:
            raise ValidationError("authToken is required.")
        async with self._locked(party_id) as party:
            user = party.user_for_token(auth_token)
        if user is None:
            raise NotFoundError("Session not found.")
        return user

    async def end(self, party_id: str, token: str | None) -> Party:
        """Finalize the party. Ending an already ended party is a no-op."""
        async with self._locked(party_id) as party:
            viewer = self._authenticate(party, token)
            require(viewer, "can_end")
            if finalize(party, self._clock()):
                dropped = self._outbox.drop(party_id)
                await self._repository.save(party)
                logger.info("party ended", user_id=viewer.id, dropped_commands=dropped)
        return party

    async def snapshot(self, party_id: str, token: str | None) -> PartySnapshot:
        async with self._locked(party_id) as party:
            playback = await self._resolve_and_persist(party)
            viewer = party.user_for_token(token)
        remaining = None
        if viewer is not None:
            remaining = max(0, self._max_active_submissions - party.active_submission_count(viewer.id))
        return PartySnapshot(party=party, playback=playback, viewer=viewer, remaining_uploads=remaining)

    # -- submissions and votes --

    async def submit(self, party_id: str, token: str | None, url: str) -> tuple[Submission, User]:
        async with self._locked(party_id) as party:
            viewer = self._authenticate(party, token)
            ensure_active(party)

            url = url.strip()
            if not url:
                raise ValidationError("YouTube link is required.")
            video_id = extract_video_id(url)
            if video_id is None:
                raise ValidationError("Unable to read that YouTube link. Try a different format.")
            if party.active_submission_count(viewer.id) >= self._max_active_submissions:
                raise QuotaExceededError(
                    f"You have reached the limit of {self._max_active_submissions} active tracks.",
                )

            metadata = with_placeholders(video_id, await self._metadata.fetch(video_id))
            submission = Submission(
                id=generate_id("vid"),
                url=canonical_watch_url(video_id),
                video_id=video_id,
                title=metadata.title or "",
                channel=metadata.channel or "",
                thumbnail=metadata.thumbnail or "",
                created_at=self._clock(),
                user_id=viewer.id,
                user_name=viewer.name,
            )
            party.submissions.append(submission)
            resolve(party)
            await self._repository.save(party)
        logger.info("track submitted", party_id=party_id, submission_id=submission.id, video_id=video_id)
        return submission, viewer

    async def remove(self, party_id: str, token: str | None, submission_id: str) -> None:
        async with self._locked(party_id) as party:
            viewer = self._authenticate(party, token)
            ensure_active(party)
            submission = self._find(party, submission_id)
            if not can_remove(submission, viewer):
                raise AuthorizationError("You do not have permission to remove this track.")

            party.submissions = [s for s in party.submissions if s.id != submission_id]
            if party.current_submission_id == submission_id:
                party.current_submission_id = None
            party.history = [h for h in party.history if h != submission_id]
            resolve(party)
            await self._repository.save(party)
        logger.info("track removed", party_id=party_id, submission_id=submission_id, user_id=viewer.id)

    async def vote(self, party_id: str, token: str | None, submission_id: str, value: int) -> tuple[Submission, User]:
        """Set, replace or (value 0) clear the viewer's vote on a track."""
        if value not in VALID_VOTES:
            raise ValidationError("Vote value must be -1, 0, or 1.")
        async with self._locked(party_id) as party:
            viewer = self._authenticate(party, token)
            ensure_active(party)
            submission = self._find(party, submission_id)
            if party.current_submission_id == submission.id and not submission.played:
                raise ConflictError("The track currently playing cannot be voted on.")

            if value == 0:
                submission.votes.pop(viewer.id, None)
            else:
                submission.votes[viewer.id] = value
            resolve(party)
            await self._repository.save(party)
        return submission, viewer

    async def promote(self, party_id: str, token: str | None, submission_id: str) -> tuple[Submission, User]:
        async with self._locked(party_id) as party:
            viewer, submission = self._admin_target(party, token, "can_promote", submission_id)
            now_ms = int(self._clock().timestamp() * 1000)
            submission.priority = next_priority(party.submissions, now_ms)
            resolve(party)
            await self._repository.save(party)
        logger.info("track promoted", party_id=party_id, submission_id=submission_id, priority=submission.priority)
        return submission, viewer

    async def reset_priority(self, party_id: str, token: str | None, submission_id: str) -> tuple[Submission, User]:
        async with self._locked(party_id) as party:
            viewer, submission = self._admin_target(party, token, "can_reset_priority", submission_id)
            submission.priority = 0
            resolve(party)
            await self._repository.save(party)
        return submission, viewer

    async def mark_played(self, party_id: str, token: str | None, submission_id: str) -> tuple[Submission, User]:
        async with self._locked(party_id) as party:
            viewer, submission = self._admin_target(party, token, "can_mark_played", submission_id)
            self._mark_played(party, submission)
            resolve(party)
            await self._repository.save(party)
        logger.info("track marked played", party_id=party_id, submission_id=submission_id)
        return submission, viewer

    # -- admin -> device commands --

    async def send_command(self, party_id: str, token: str | None, action: PlayerAction) -> Command:
        async with self._locked(party_id) as party:
            viewer = self._authenticate(party, token)
            ensure_active(party)
            require(viewer, "can_control_player")
            command = self._outbox.enqueue(party_id, action, self._clock())
        logger.info("command queued", party_id=party_id, command_id=command.id, action=action)
        return command

    # -- playback device --

    async def player_state(self, party_id: str, access_code: str, acks: Iterable[str] = ()) -> PlayerState:
        """Device poll: drop acknowledged commands, then report state and what is still pending."""
        async with self._locked(party_id) as party:
            self._check_access_code(party, access_code)
            acked = self._outbox.acknowledge(party_id, acks)
            if acked:
                logger.info("commands acknowledged", party_id=party_id, count=acked)
            playback = await self._resolve_and_persist(party)
            commands = self._outbox.pending(party_id)

        ended = party.is_ended
        return PlayerState(
            party=party,
            now_playing=None if ended else playback.current,
            upcoming=[] if ended else playback.upcoming,
            history=playback.history,
            can_go_previous=not ended and bool(party.history),
            commands=commands,
        )

    async def advance(self, party_id: str, access_code: str, submission_id: str | None) -> None:
        """Mark the current track played and move the pointer to the next one."""
        async with self._locked(party_id) as party:
            self._check_access_code(party, access_code)
            ensure_active(party)
            if not submission_id:
                raise ValidationError("submissionId is required.")
            submission = self._find(party, submission_id)
            resolve(party)
            if party.current_submission_id != submission.id:
                raise ConflictError("This track is not currently playing.")

            self._mark_played(party, submission)
            playback = resolve(party)
            await self._repository.save(party)
        logger.info(
            "track advanced",
            party_id=party_id,
            submission_id=submission_id,
            next_submission_id=playback.current.id if playback.current else None,
        )

    async def previous(self, party_id: str, access_code: str) -> Submission:
        """Pop the history stack and reinstate that track as current with top priority."""
        async with self._locked(party_id) as party:
            self._check_access_code(party, access_code)
            ensure_active(party)
            if not party.history:
                raise NotFoundError("No previous track to play.")
            previous_id = party.history.pop()
            submission = self._find(party, previous_id)

            now_ms = int(self._clock().timestamp() * 1000)
            submission.played = False
            submission.played_at = None
            submission.priority = next_priority(party.submissions, now_ms)
            party.current_submission_id = submission.id
            resolve(party)
            await self._repository.save(party)
        logger.info("track restored", party_id=party_id, submission_id=submission.id)
        return submission

    async def reset(self, party_id: str, access_code: str) -> None:
        """Unplay every track, clear priorities and history, drop pending commands."""
        async with self._locked(party_id) as party:
            self._check_access_code(party, access_code)
            ensure_active(party)
            for submission in party.submissions:
                submission.played = False
                submission.played_at = None
                submission.priority = 0
            party.current_submission_id = None
            party.history = []
            dropped = self._outbox.drop(party_id)
            resolve(party)
            await self._repository.save(party)
        logger.info("queue reset", party_id=party_id, dropped_commands=dropped)

    # -- private helpers --

    @contextlib.asynccontextmanager
    async def _locked(self, party_id: str) -> AsyncIterator[Party]:
        with structlog.contextvars.bound_contextvars(party_id=party_id):
            async with self._locks.lock_for(party_id):
                yield await self._repository.load(party_id)

    async def _resolve_and_persist(self, party: Party) -> PlaybackState:
        playback = resolve(party)
        if playback.mutated:
            await self._repository.save(party)
            logger.debug("playback pointer healed", current_submission_id=party.current_submission_id)
        return playback

    def _authenticate(self, party: Party, token: str | None) -> User:
        user = party.user_for_token(token)
        if user is None:
            raise AuthenticationError("Authentication required.")
        return user

    def _admin_target(
        self,
        party: Party,
        token: str | None,
        capability: str,
        submission_id: str,
    ) -> tuple[User, Submission]:
        viewer = self._authenticate(party, token)
        ensure_active(party)
        require(viewer, capability)
        return viewer, self._find(party, submission_id)

    def _mark_played(self, party: Party, submission: Submission) -> None:
        submission.played = True
        submission.played_at = self._clock()
        if party.current_submission_id == submission.id:
            party.current_submission_id = None
        party.push_history(submission.id)

    @staticmethod
    def _find(party: Party, submission_id: str) -> Submission:
        submission = party.find_submission(submission_id)
        if submission is None:
            raise NotFoundError(TRACK_NOT_FOUND_MESSAGE)
        return submission

    @staticmethod
    def _check_access_code(party: Party, access_code: str) -> None:
        presented = (access_code or "").strip()
        if not presented or not hmac.compare_digest(presented.encode(), party.access_code.encode()):
            raise AuthorizationError(INVALID_ACCESS_CODE_MESSAGE)
