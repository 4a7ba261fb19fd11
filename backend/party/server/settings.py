"""Party server configuration via environment variables."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from party.metadata import DEFAULT_METADATA_ENDPOINT, DEFAULT_METADATA_TIMEOUT_SECONDS
from party.service import DEFAULT_MAX_ACTIVE_SUBMISSIONS
from shared.validators import StringListEnvSettingsSource, parse_string_list

if TYPE_CHECKING:
    from pydantic_settings.sources.base import PydanticBaseSettingsSource


class PartyServerSettings(BaseSettings):
    model_config = {"env_prefix": "PARTY_"}

    log_dir: str = "backend/logs/party"
    store_backend: Literal["file", "memory"] = "file"
    data_path: Path = Path("data/db.json")
    cors_origins: list[str] = []
    public_base_url: str = ""  # e.g. "https://party.example.com"; derived from the request when empty
    join_path: str = "/party.html"
    max_active_submissions: int = Field(default=DEFAULT_MAX_ACTIVE_SUBMISSIONS, ge=1)
    metadata_endpoint: str = DEFAULT_METADATA_ENDPOINT
    metadata_timeout_seconds: float = Field(default=DEFAULT_METADATA_TIMEOUT_SECONDS, gt=0, le=30)
    poll_interval_ms: int = Field(default=3000, ge=250)
    max_body_bytes: int = Field(default=1_000_000, ge=1024)

    @field_validator("cors_origins", mode="before")
    @classmethod
    def validate_cors_origins(cls, v: str | list[str]) -> list[str]:
        return parse_string_list(v, allow_empty=True)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            StringListEnvSettingsSource(settings_cls, frozenset({"cors_origins"})),
            dotenv_settings,
            file_secret_settings,
        )
