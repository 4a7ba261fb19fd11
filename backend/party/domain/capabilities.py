"""Role capability table.

Roles are a closed set; each maps to one immutable Capabilities record.
Operations check a named capability once instead of comparing role strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

from party.domain.errors import AuthorizationError
from party.domain.models import Role

if TYPE_CHECKING:
    from party.domain.models import Submission, User

ADMIN_REQUIRED_MESSAGE = "Admin privileges required."


@dataclass(frozen=True)
class Capabilities:
    can_promote: bool
    can_mark_played: bool
    can_reset_priority: bool
    can_end: bool
    can_control_player: bool
    can_view_access_code: bool
    can_remove_any: bool


ROLE_CAPABILITIES = MappingProxyType(
    {
        Role.ADMIN: Capabilities(
            can_promote=True,
            can_mark_played=True,
            can_reset_priority=True,
            can_end=True,
            can_control_player=True,
            can_view_access_code=True,
            can_remove_any=True,
        ),
        Role.GUEST: Capabilities(
            can_promote=False,
            can_mark_played=False,
            can_reset_priority=False,
            can_end=False,
            can_control_player=False,
            can_view_access_code=False,
            can_remove_any=False,
        ),
    },
)


def capabilities_for(user: User) -> Capabilities:
    return ROLE_CAPABILITIES[user.role]


def require(user: User, capability: str) -> None:
    """Raise AuthorizationError unless the user's role grants ``capability``."""
    if not getattr(capabilities_for(user), capability):
        raise AuthorizationError(ADMIN_REQUIRED_MESSAGE)


def can_remove(submission: Submission, actor: User) -> bool:
    return capabilities_for(actor).can_remove_any or submission.user_id == actor.id
