"""Track link parsing.

Accepted shapes:
- https://youtu.be/<id>
- https://www.youtube.com/watch?v=<id>
- https://www.youtube.com/shorts/<id>
- https://www.youtube.com/embed/<id>
"""

import re
from urllib.parse import parse_qs, urlsplit

_VIDEO_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def extract_video_id(url: str) -> str | None:
    """Return the canonical video id for a supported link, or None."""
    try:
        parsed = urlsplit(url.strip())
        hostname = parsed.hostname
    except ValueError:
        return None
    if not hostname:
        return None

    candidate: str | None = None
    if hostname == "youtu.be":
        candidate = parsed.path.lstrip("/").split("/")[0]
    elif hostname == "youtube.com" or hostname.endswith(".youtube.com"):
        query_ids = parse_qs(parsed.query).get("v")
        if query_ids:
            candidate = query_ids[0]
        else:
            parts = [p for p in parsed.path.split("/") if p]
            if len(parts) >= 2 and parts[0] in {"shorts", "embed"}:  # noqa: PLR2004
                candidate = parts[1]

    if candidate and _VIDEO_ID_PATTERN.match(candidate):
        return candidate
    return None


def canonical_watch_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"
