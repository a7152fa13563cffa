import uuid
from datetime import UTC, datetime

import pytest

from stayfinder.core.exceptions import ServerError, ValidationError
from stayfinder.domain.roles import Admin, Guest, Host, account_role, promote_to_host
from stayfinder.models.user import HostProfile, User

NOW = datetime(2024, 3, 1, tzinfo=UTC)


def make_user(role: str = "guest", profile: bool = False) -> User:
    user = User(id=uuid.uuid4(), email=f"{role}@example.com", name="Test", role=role, host_profile=None)
    if profile:
        user.host_profile = HostProfile(user_id=user.id, host_since=NOW)
    return user


def test_guest_and_admin_variants():
    assert isinstance(account_role(make_user("guest")), Guest)
    assert isinstance(account_role(make_user("admin")), Admin)


def test_host_variant_carries_profile():
    user = make_user("host", profile=True)
    role = account_role(user)
    assert isinstance(role, Host)
    assert role.profile is user.host_profile


def test_inconsistent_rows_are_refused():
    with pytest.raises(ServerError):
        account_role(make_user("host"))
    with pytest.raises(ServerError):
        account_role(make_user("guest", profile=True))


def test_promote_guest_to_host():
    user = make_user("guest")
    role = promote_to_host(user, NOW)

    assert user.role == "host"
    assert user.host_profile is role.profile
    assert role.profile.host_since == NOW


def test_promotion_is_one_way():
    with pytest.raises(ValidationError, match="already a host"):
        promote_to_host(make_user("host", profile=True), NOW)
    with pytest.raises(ValidationError):
        promote_to_host(make_user("admin"), NOW)
