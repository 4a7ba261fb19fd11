"""Party authentication: bearer-token backend and route policy markers."""

from party.auth.backend import BearerTokenBackend, request_token
from party.auth.models import BearerTokenHolder
from party.auth.policy import (
    bearer_optional,
    bearer_required,
    device_route,
    public_route,
    validate_route_auth_policy,
)

__all__ = [
    "BearerTokenBackend",
    "BearerTokenHolder",
    "bearer_optional",
    "bearer_required",
    "device_route",
    "public_route",
    "request_token",
    "validate_route_auth_policy",
]
