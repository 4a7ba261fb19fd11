"""Request user model for Starlette AuthenticationMiddleware integration."""

from __future__ import annotations

from starlette.authentication import BaseUser


class BearerTokenHolder(BaseUser):
    """A request that presented a bearer token.

    Tokens are scoped to a single party, so the token is only resolved to
    a party member once that party is loaded. Holding a token proves
    nothing by itself.
    """

    def __init__(self, token: str) -> None:
        self._token = token

    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def display_name(self) -> str:  # pragma: no cover
        return ""

    @property
    def token(self) -> str:
        return self._token
