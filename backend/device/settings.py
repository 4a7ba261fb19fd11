"""Playback device configuration via environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings

from device.handled import DEFAULT_HANDLED_CAPACITY


class DeviceSettings(BaseSettings):
    model_config = {"env_prefix": "DEVICE_"}

    log_dir: str = "backend/logs/device"
    server_url: str = "http://localhost:3000"
    party_id: str
    access_code: str
    poll_interval_seconds: float = Field(default=3.0, gt=0)
    handled_capacity: int = Field(default=DEFAULT_HANDLED_CAPACITY, ge=1)
    request_timeout_seconds: float = Field(default=10.0, gt=0)
