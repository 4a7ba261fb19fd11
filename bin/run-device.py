"""Run a headless playback device against a party server.

Usage: uv run python bin/run-device.py

Reads DEVICE_SERVER_URL, DEVICE_PARTY_ID and DEVICE_ACCESS_CODE from the
environment. Playback actions are logged instead of rendered.
"""

import asyncio
import signal
import sys
from pathlib import Path

# Add backend to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "backend"))

import httpx

from device.api import DeviceApiError, PlayerApi
from device.controller import LoggingController
from device.device import PlaybackDevice
from device.handled import HandledCommands
from device.settings import DeviceSettings
from shared.logging import setup_logging


async def main() -> None:
    settings = DeviceSettings()  # type: ignore[call-arg]
    setup_logging(log_dir=settings.log_dir, name="device")

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    async with httpx.AsyncClient(base_url=settings.server_url, timeout=settings.request_timeout_seconds) as client:
        device = PlaybackDevice(
            PlayerApi(client, settings.party_id, settings.access_code),
            LoggingController(),
            handled=HandledCommands(settings.handled_capacity),
            poll_interval_seconds=settings.poll_interval_seconds,
        )
        try:
            await device.run(stop)
        except DeviceApiError as e:
            print(f"Error: {e.message}")
            sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
