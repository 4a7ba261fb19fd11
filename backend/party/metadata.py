"""Best-effort track metadata lookup.

Enrichment never blocks a submission: every failure mode (timeout,
transport error, non-2xx, undecodable body) yields None and the caller
falls back to placeholder metadata.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from http import HTTPStatus
from typing import TYPE_CHECKING, Protocol

import httpx
import structlog

from party.domain.links import canonical_watch_url

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = structlog.get_logger()

DEFAULT_METADATA_ENDPOINT = "https://noembed.com/embed"
DEFAULT_METADATA_TIMEOUT_SECONDS = 4.0


@dataclass(frozen=True)
class TrackMetadata:
    title: str | None = None
    channel: str | None = None
    thumbnail: str | None = None


def with_placeholders(video_id: str, metadata: TrackMetadata | None) -> TrackMetadata:
    """Fill any missing field with the generic placeholder for ``video_id``."""
    metadata = metadata or TrackMetadata()
    return TrackMetadata(
        title=metadata.title or f"YouTube video ({video_id})",
        channel=metadata.channel or "Unknown creator",
        thumbnail=metadata.thumbnail or f"https://img.youtube.com/vi/{video_id}/hqdefault.jpg",
    )


class MetadataClient(Protocol):
    async def fetch(self, video_id: str) -> TrackMetadata | None: ...


class OEmbedMetadataClient:
    """Look up title, channel and thumbnail through an oEmbed-style endpoint."""

    def __init__(
        self,
        endpoint: str = DEFAULT_METADATA_ENDPOINT,
        timeout_seconds: float = DEFAULT_METADATA_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    async def fetch(self, video_id: str) -> TrackMetadata | None:
        try:
            async with asyncio.timeout(self._timeout_seconds):
                data = await self._request(video_id)
        except TimeoutError:
            logger.warning("metadata lookup timed out", video_id=video_id)
            return None
        except httpx.HTTPError as e:
            logger.warning("metadata lookup failed", video_id=video_id, error=str(e))
            return None
        if data is None:
            return None
        return TrackMetadata(
            title=_string_or_none(data.get("title")),
            channel=_string_or_none(data.get("author_name")),
            thumbnail=_string_or_none(data.get("thumbnail_url")),
        )

    async def _request(self, video_id: str) -> Mapping[str, object] | None:
        async with httpx.AsyncClient(timeout=self._timeout_seconds, transport=self._transport) as client:
            response = await client.get(self._endpoint, params={"url": canonical_watch_url(video_id)})
        if response.status_code >= HTTPStatus.BAD_REQUEST:
            logger.warning("metadata lookup rejected", video_id=video_id, status=response.status_code)
            return None
        try:
            data = response.json()
        except ValueError:
            logger.warning("metadata response was not JSON", video_id=video_id)
            return None
        if not isinstance(data, dict):
            return None
        return data


def _string_or_none(value: object) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None
