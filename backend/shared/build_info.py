"""Build metadata exposed at runtime.

APP_VERSION is set via environment variable in CI. Otherwise the
installed distribution version is used, falling back to "dev" for
source checkouts that were never installed.
"""

import os
from importlib import metadata

DISTRIBUTION_NAME = "party-queue"


def _installed_version() -> str:
    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        return "dev"


APP_VERSION: str = os.environ.get("APP_VERSION") or _installed_version()
