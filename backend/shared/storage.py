"""Atomic JSON file writes for whole-document stores.

Documents are written to a temp file in the target directory, fsynced,
and renamed into place so readers never observe a truncated file.
Files get owner-only permissions (0o600) since they hold bearer tokens.
"""

import contextlib
import json
import os
import tempfile
from pathlib import Path
from typing import Any

_FILE_MODE = 0o600


def write_json_atomic(path: Path, data: Any, *, indent: int | None = 2) -> None:  # noqa: ANN401
    """Serialize ``data`` as JSON and atomically replace ``path`` with it."""
    path.parent.mkdir(parents=True, exist_ok=True)
    content = json.dumps(data, indent=indent).encode("utf-8")

    fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.stem}_", suffix=".tmp")
    fd_owned = True
    try:
        with os.fdopen(fd, "wb") as f:
            fd_owned = False  # os.fdopen took ownership; it will close fd
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
            os.fchmod(f.fileno(), _FILE_MODE)
        Path(tmp_path).replace(path)
    except BaseException:
        if fd_owned:
            with contextlib.suppress(OSError):
                os.close(fd)
        with contextlib.suppress(OSError):
            Path(tmp_path).unlink()
        raise


def read_json(path: Path) -> Any | None:  # noqa: ANN401
    """Read a JSON document, returning None when the file does not exist.

    Read or parse failures on an existing file raise OSError so callers
    never overwrite data they could not load.
    """
    if not path.exists():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError, OSError) as exc:
        msg = f"Failed to load JSON document from {path}"
        raise OSError(msg) from exc
