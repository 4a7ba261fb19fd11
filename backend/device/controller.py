"""Playback controller interface driven by the device loop."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

import structlog

if TYPE_CHECKING:
    from device.models import TrackInfo

logger = structlog.get_logger()


class PlaybackController(Protocol):
    """Whatever actually renders media: an embedded player, a browser bridge, ..."""

    async def load(self, track: TrackInfo | None) -> None: ...

    async def play(self) -> None: ...

    async def pause(self) -> None: ...

    async def restart(self) -> None: ...


class LoggingController:
    """Headless controller that only logs what it would do."""

    async def load(self, track: TrackInfo | None) -> None:
        if track is None:
            logger.info("queue empty, stopping playback")
            return
        logger.info("loading track", submission_id=track.id, video_id=track.video_id, title=track.title)

    async def play(self) -> None:
        logger.info("play")

    async def pause(self) -> None:
        logger.info("pause")

    async def restart(self) -> None:
        logger.info("restart")
