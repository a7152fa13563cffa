"""Account roles as an explicit variant: Guest, Host(profile) or Admin.

The ``role`` column and the host profile row are only ever changed together,
through ``promote_to_host``; ``account_role`` refuses rows where they disagree.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Union

from stayfinder.core.exceptions import ServerError, ValidationError

if TYPE_CHECKING:
    from stayfinder.models.user import HostProfile, User

ROLE_TRANSITIONS = {
    "guest": {"host"},
    "host": set(),
    "admin": set(),
}


@dataclass(frozen=True)
class Guest:
    pass


@dataclass(frozen=True)
class Host:
    profile: "HostProfile"


@dataclass(frozen=True)
class Admin:
    pass


AccountRole = Union[Guest, Host, Admin]


def account_role(user: "User") -> AccountRole:
    """Decode the stored role into its variant."""
    profile = user.host_profile
    if user.role == "host":
        if profile is None:
            raise ServerError(f"Host {user.id} has no host profile")
        return Host(profile=profile)
    if profile is not None:
        raise ServerError(f"User {user.id} with role '{user.role}' has a host profile")
    if user.role == "guest":
        return Guest()
    if user.role == "admin":
        return Admin()
    raise ServerError(f"Unknown role '{user.role}' for user {user.id}")


def promote_to_host(user: "User", now: datetime) -> Host:
    """Turn a guest account into a host account with a fresh host profile."""
    from stayfinder.models.user import HostProfile

    current = account_role(user)
    if isinstance(current, Host):
        raise ValidationError("User is already a host")
    if "host" not in ROLE_TRANSITIONS.get(user.role, set()):
        raise ValidationError(f"A {user.role} account cannot become a host")

    profile = HostProfile(user_id=user.id, host_since=now)
    user.host_profile = profile
    user.role = "host"
    return Host(profile=profile)
