"""Route auth policy helpers for fail-closed authorization.

Each helper wraps a route endpoint and sets the ``AUTH_POLICY_ATTR`` marker
so that startup validation can verify every route has an explicit auth policy.

- ``public_route``: no credentials.
- ``bearer_optional``: serves anonymous viewers, personalizes for token holders.
- ``bearer_required``: 401 before any store access when no token is presented.
- ``device_route``: the playback device; the party access code in the body is
  checked by the service, bearer tokens are ignored.
"""

from __future__ import annotations

import functools
from typing import TYPE_CHECKING

from starlette.authentication import has_required_scope
from starlette.routing import Mount, Route

from party.auth.backend import BEARER_SCOPE
from party.domain.errors import AuthenticationError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from starlette.requests import Request
    from starlette.responses import Response
    from starlette.routing import BaseRoute

    Endpoint = Callable[[Request], Awaitable[Response]]

AUTH_POLICY_ATTR = "__auth_policy__"
AUTHENTICATION_REQUIRED_MESSAGE = "Authentication required."


def _mark(endpoint: Endpoint, policy: str) -> Endpoint:
    """Return a thin wrapper carrying the policy marker.

    The marker lives on the wrapper, not the original callable, so reusing
    the same function on another route without wrapping is still caught.
    """

    @functools.wraps(endpoint)
    async def wrapper(request: Request) -> Response:
        return await endpoint(request)

    setattr(wrapper, AUTH_POLICY_ATTR, policy)
    return wrapper


def public_route(endpoint: Endpoint) -> Endpoint:
    return _mark(endpoint, "public")


def bearer_optional(endpoint: Endpoint) -> Endpoint:
    return _mark(endpoint, "bearer_optional")


def device_route(endpoint: Endpoint) -> Endpoint:
    return _mark(endpoint, "device")


def bearer_required(endpoint: Endpoint) -> Endpoint:
    """Require a bearer token; raise AuthenticationError (401) otherwise."""

    @functools.wraps(endpoint)
    async def wrapper(request: Request) -> Response:
        if not has_required_scope(request, [BEARER_SCOPE]):
            raise AuthenticationError(AUTHENTICATION_REQUIRED_MESSAGE)
        return await endpoint(request)

    setattr(wrapper, AUTH_POLICY_ATTR, "bearer_required")
    return wrapper


def validate_route_auth_policy(routes: list[BaseRoute]) -> None:
    """Verify every Route has an auth policy marker. Mount routes are exempt.

    Raises RuntimeError listing all unclassified routes if any are found.
    """
    unclassified: list[str] = []
    for route in routes:
        if isinstance(route, Mount):
            continue
        if isinstance(route, Route) and not hasattr(route.endpoint, AUTH_POLICY_ATTR):
            name = route.name or getattr(route.endpoint, "__name__", "unknown")
            unclassified.append(f"{route.path} ({name})")

    if unclassified:
        details = ", ".join(unclassified)
        msg = f"Unclassified routes missing auth policy: {details}"
        raise RuntimeError(msg)
