"""Polling loop that mirrors the server's playback state onto a controller.

Commands are executed at most once per device: their ids go into a bounded
``HandledCommands`` set and are acknowledged on the next poll. Acks are only
forgotten once a poll carrying them succeeds, and redelivered commands are
re-acknowledged without being executed again.
"""

from __future__ import annotations

import asyncio
import contextlib
from http import HTTPStatus
from typing import TYPE_CHECKING

import httpx
import structlog

from device.api import DeviceApiError
from device.handled import HandledCommands

if TYPE_CHECKING:
    from device.api import PlayerApi
    from device.controller import PlaybackController
    from device.models import CommandInfo, PlayerStateResponse, TrackInfo

logger = structlog.get_logger()


class PlaybackDevice:
    def __init__(
        self,
        api: PlayerApi,
        controller: PlaybackController,
        *,
        handled: HandledCommands | None = None,
        poll_interval_seconds: float = 3.0,
    ) -> None:
        self._api = api
        self._controller = controller
        self._handled = handled if handled is not None else HandledCommands()
        self._poll_interval_seconds = poll_interval_seconds
        self._pending_acks: list[str] = []
        self._now_playing: TrackInfo | None = None

    @property
    def now_playing(self) -> TrackInfo | None:
        return self._now_playing

    @property
    def pending_acks(self) -> list[str]:
        return list(self._pending_acks)

    async def poll_once(self) -> PlayerStateResponse:
        """Fetch state, sync the current track and run any new commands."""
        sent = list(self._pending_acks)
        state = await self._api.state(sent)
        self._pending_acks = [ack for ack in self._pending_acks if ack not in sent]

        await self._sync_track(state.now_playing)
        for command in state.commands:
            if command.id in self._handled:
                logger.debug("command redelivered", command_id=command.id)
            else:
                # a command the controller failed on stays unhandled and unacked
                await self._execute(command)
                self._handled.mark(command.id)
            if command.id not in self._pending_acks:
                self._pending_acks.append(command.id)
        return state

    async def track_finished(self) -> None:
        """Report that the loaded track ended; a stale report is ignored."""
        track = self._now_playing
        if track is None:
            return
        try:
            await self._api.advance(track.id)
        except DeviceApiError as exc:
            if exc.status_code != HTTPStatus.CONFLICT:
                raise
            logger.info("advance ignored, track is no longer current", submission_id=track.id)

    async def previous(self) -> None:
        await self._api.previous()

    async def reset(self) -> None:
        await self._api.reset()

    async def run(self, stop: asyncio.Event | None = None) -> None:
        """Poll until ``stop`` is set or the party ends.

        Transient server and controller failures are logged and retried on the
        next poll.
        """
        stop = stop or asyncio.Event()
        while not stop.is_set():
            interval = self._poll_interval_seconds
            try:
                state = await self.poll_once()
            except DeviceApiError as exc:
                if exc.is_fatal:
                    logger.error("device rejected by server", status=exc.status_code, error=exc.message)
                    raise
                logger.warning("poll failed", status=exc.status_code, error=exc.message)
            except httpx.HTTPError as exc:
                logger.warning("poll failed", error=str(exc))
            except Exception:
                logger.exception("playback controller failed")
            else:
                if state.party.ended_at is not None:
                    logger.info("party ended, stopping device", party_id=state.party.id)
                    return
                if state.poll_interval_ms:
                    interval = state.poll_interval_ms / 1000
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(stop.wait(), timeout=interval)

    async def _sync_track(self, track: TrackInfo | None) -> None:
        current_id = self._now_playing.id if self._now_playing else None
        new_id = track.id if track else None
        if current_id == new_id:
            return
        await self._controller.load(track)
        self._now_playing = track

    async def _execute(self, command: CommandInfo) -> None:
        logger.info("executing command", command_id=command.id, action=command.action)
        match command.action:
            case "play":
                await self._controller.play()
            case "pause":
                await self._controller.pause()
            case "restart":
                await self._controller.restart()
            case _:
                logger.warning("unknown command action", command_id=command.id, action=command.action)
