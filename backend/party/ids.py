"""Identifier and secret generation."""

import secrets


def generate_id(prefix: str) -> str:
    """Return an opaque id such as ``pty_9f1c2e7a4b0d3e68``."""
    return f"{prefix}_{secrets.token_hex(8)}"


def generate_access_code() -> str:
    """Six hex characters shown to admins and typed into the playback device."""
    return secrets.token_hex(3)
