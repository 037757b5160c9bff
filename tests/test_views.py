from __future__ import annotations

import pytest

from usermanagement.database import InMemoryDataContext
from usermanagement.models import User
from usermanagement.service import UserNotFoundError, UserService
from usermanagement.views import (
    UserListItem,
    build_log_history,
    build_user_list,
    build_user_logs,
    resolve_filter,
)


@pytest.fixture()
def service() -> UserService:
    population = [
        User(forename="Ada", surname="Active", email="ada@example.com", is_active=True),
        User(forename="Ian", surname="Idle", email="ian@example.com", is_active=False),
        User(forename="Amy", surname="Active", email="amy@example.com", is_active=True),
        User(forename="Ivy", surname="Idle", email="ivy@example.com", is_active=False),
    ]
    return UserService(InMemoryDataContext(seed=population))


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("active", "active"),
        ("ACTIVE", "active"),
        ("Inactive", "inactive"),
        ("all", "all"),
        ("bogus", "all"),
        ("", "all"),
        (None, "all"),
    ],
)
def test_resolve_filter(raw, expected) -> None:
    assert resolve_filter(raw) == expected


def test_inactive_filter_returns_only_inactive_users(service: UserService) -> None:
    model = build_user_list(service, "inactive")

    assert model.active_filter == "inactive"
    assert [item.email for item in model.items] == ["ian@example.com", "ivy@example.com"]


def test_active_filter_returns_only_active_users(service: UserService) -> None:
    model = build_user_list(service, "Active")

    assert model.active_filter == "active"
    assert all(item.is_active for item in model.items)
    assert len(model.items) == 2


def test_unknown_filter_returns_everyone_labelled_all(service: UserService) -> None:
    model = build_user_list(service, "bogus")

    assert model.active_filter == "all"
    assert len(model.items) == 4


def test_list_items_exclude_logs(service: UserService) -> None:
    model = build_user_list(service, None)

    assert isinstance(model.items[0], UserListItem)
    assert not hasattr(model.items[0], "logs")


def test_user_logs_view_collects_entries(service: UserService) -> None:
    user = service.get_by_id(1)
    user.surname = "Renamed"
    service.update(user)

    model = build_user_logs(service, 1)

    assert model.user_id == 1
    assert model.user_name == "Ada Renamed"
    assert [entry.action for entry in model.logs] == ["Updated"]


def test_user_logs_view_for_missing_user_raises(service: UserService) -> None:
    with pytest.raises(UserNotFoundError):
        build_user_logs(service, 404)


def test_log_history_keeps_entries_of_deleted_users(service: UserService) -> None:
    service.delete(2)

    history = build_log_history(service)

    assert [(entry.user_id, entry.action) for entry in history] == [(2, "Deleted")]
    assert history[0].timestamp_display.endswith("UTC")
