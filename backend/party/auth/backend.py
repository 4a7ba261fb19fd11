"""Starlette AuthenticationBackend that extracts bearer tokens."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.authentication import AuthCredentials, AuthenticationBackend

from party.auth.models import BearerTokenHolder

if TYPE_CHECKING:
    from starlette.requests import HTTPConnection

BEARER_SCOPE = "bearer"
_BEARER_PARTS = 2


def parse_bearer(header: str | None) -> str | None:
    """Return the token from an ``Authorization: Bearer <token>`` header, else None."""
    if not header:
        return None
    parts = header.split()
    if len(parts) != _BEARER_PARTS or parts[0].lower() != "bearer":
        return None
    return parts[1]


class BearerTokenBackend(AuthenticationBackend):
    """Attach the presented bearer token to ``request.user``.

    A malformed or missing header leaves the request unauthenticated rather
    than failing it, so optional-bearer routes still serve anonymous viewers.
    """

    async def authenticate(
        self,
        conn: HTTPConnection,
    ) -> tuple[AuthCredentials, BearerTokenHolder] | None:
        token = parse_bearer(conn.headers.get("authorization"))
        if token is None:
            return None
        return AuthCredentials([BEARER_SCOPE]), BearerTokenHolder(token)


def request_token(conn: HTTPConnection) -> str | None:
    """Bearer token attached by BearerTokenBackend, if any."""
    user = conn.user
    if isinstance(user, BearerTokenHolder):
        return user.token
    return None
