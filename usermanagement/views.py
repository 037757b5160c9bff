"""Presentation models handed to the templates."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import List, Optional, Tuple

from .models import Log, User
from .service import UserService

FILTER_ACTIVE = "active"
FILTER_INACTIVE = "inactive"
FILTER_ALL = "all"


@dataclass(frozen=True)
class UserListItem:
    id: int
    forename: str
    surname: str
    email: str
    is_active: bool
    date_of_birth: Optional[date]


@dataclass(frozen=True)
class UserListView:
    items: Tuple[UserListItem, ...]
    active_filter: str


@dataclass(frozen=True)
class UserDetail:
    """Read-only details shown on the view page."""

    id: int
    forename: str
    surname: str
    email: str
    is_active: bool
    date_of_birth: Optional[date]

    @property
    def full_name(self) -> str:
        return f"{self.forename} {self.surname}".strip()


@dataclass(frozen=True)
class LogEntry:
    id: int
    user_id: int
    action: str
    details: str
    timestamp: datetime

    @property
    def timestamp_display(self) -> str:
        return self.timestamp.astimezone(timezone.utc).strftime("%d %b %Y %H:%M:%S %Z")


@dataclass(frozen=True)
class UserLogsView:
    user_id: int
    user_name: str
    logs: Tuple[LogEntry, ...]


def resolve_filter(raw: Optional[str]) -> str:
    """Map a ``filter`` query value onto ``active``, ``inactive`` or ``all``."""

    if raw is None:
        return FILTER_ALL
    lowered = raw.strip().lower()
    if lowered in {FILTER_ACTIVE, FILTER_INACTIVE}:
        return lowered
    return FILTER_ALL


def to_list_item(user: User) -> UserListItem:
    return UserListItem(
        id=user.id,
        forename=user.forename,
        surname=user.surname,
        email=user.email,
        is_active=user.is_active,
        date_of_birth=user.date_of_birth,
    )


def to_detail(user: User) -> UserDetail:
    return UserDetail(
        id=user.id,
        forename=user.forename,
        surname=user.surname,
        email=user.email,
        is_active=user.is_active,
        date_of_birth=user.date_of_birth,
    )


def to_log_entry(log: Log) -> LogEntry:
    return LogEntry(
        id=log.id,
        user_id=log.user_id,
        action=log.action,
        details=log.details,
        timestamp=log.timestamp,
    )


def build_user_list(service: UserService, raw_filter: Optional[str]) -> UserListView:
    active_filter = resolve_filter(raw_filter)
    if active_filter == FILTER_ACTIVE:
        users = service.filter_by_active(True)
    elif active_filter == FILTER_INACTIVE:
        users = service.filter_by_active(False)
    else:
        users = service.get_all()
    return UserListView(
        items=tuple(to_list_item(user) for user in users),
        active_filter=active_filter,
    )


def build_user_logs(service: UserService, user_id: int) -> UserLogsView:
    user = service.get_by_id(user_id)
    logs = service.get_logs_for_user(user_id)
    return UserLogsView(
        user_id=user.id,
        user_name=user.full_name,
        logs=tuple(to_log_entry(log) for log in logs),
    )


def build_log_history(service: UserService) -> List[LogEntry]:
    return [to_log_entry(log) for log in service.get_all_logs()]


__all__ = [
    "FILTER_ACTIVE",
    "FILTER_ALL",
    "FILTER_INACTIVE",
    "LogEntry",
    "UserDetail",
    "UserListItem",
    "UserListView",
    "UserLogsView",
    "build_log_history",
    "build_user_list",
    "build_user_logs",
    "resolve_filter",
    "to_detail",
    "to_list_item",
    "to_log_entry",
]
