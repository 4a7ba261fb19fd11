"""Response models for the player endpoints, as seen by the device."""

from pydantic import BaseModel, ConfigDict, Field


class _Response(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class TrackInfo(_Response):
    id: str
    video_id: str = Field(alias="videoId")
    title: str
    channel: str = ""
    submitted_by: str = Field(default="", alias="submittedBy")


class CommandInfo(_Response):
    id: str
    action: str


class PartyInfo(_Response):
    id: str
    name: str
    ended_at: str | None = Field(default=None, alias="endedAt")


class PlayerStateResponse(_Response):
    party: PartyInfo
    now_playing: TrackInfo | None = Field(default=None, alias="nowPlaying")
    upcoming: list[TrackInfo] = Field(default_factory=list)
    can_go_previous: bool = Field(default=False, alias="canGoPrevious")
    commands: list[CommandInfo] = Field(default_factory=list)
    poll_interval_ms: int | None = Field(default=None, alias="pollIntervalMs")
