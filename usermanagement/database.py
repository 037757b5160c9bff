"""In-memory persistence for users and their audit logs."""
from __future__ import annotations

import abc
import logging
import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Dict, Iterable, Iterator, List, Optional

from .models import Log, User

logger = logging.getLogger("usermanagement.database")


def _current_timestamp() -> datetime:
    return datetime.now(timezone.utc)


def years_before(today: date, years: int) -> date:
    try:
        return today.replace(year=today.year - years)
    except ValueError:
        # 29 February in a non-leap target year
        return today.replace(year=today.year - years, day=28)


_DEFAULT_SEED = (
    ("Peter", "Loew", "ploew@example.com", True, 20),
    ("Benjamin Franklin", "Gates", "bfgates@example.com", True, 55),
    ("Castor", "Troy", "ctroy@example.com", False, 18),
    ("Memphis", "Raines", "mraines@example.com", True, 20),
    ("Stanley", "Goodspeed", "sgodspeed@example.com", True, 70),
    ("H.I.", "McDunnough", "himcdunnough@example.com", True, 130),
    ("Cameron", "Poe", "cpoe@example.com", False, 25),
    ("Edward", "Malus", "emalus@example.com", False, 80),
    ("Damon", "Macready", "dmacready@example.com", False, 100),
    ("Johnny", "Blaze", "jblaze@example.com", True, 36),
    ("Robin", "Feld", "rfeld@example.com", True, 22),
)


def default_seed_users(today: Optional[date] = None) -> List[User]:
    """Return the sample population loaded into a fresh store."""

    today = today or date.today()
    return [
        User(
            id=index,
            forename=forename,
            surname=surname,
            email=email,
            is_active=is_active,
            date_of_birth=years_before(today, age),
        )
        for index, (forename, surname, email, is_active, age) in enumerate(_DEFAULT_SEED, start=1)
    ]


class DataContext(abc.ABC):
    """Storage capabilities the user service depends on."""

    @abc.abstractmethod
    def atomic(self):
        """Context manager that makes a group of operations appear atomic."""

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------
    @abc.abstractmethod
    def get_all(self) -> List[User]:
        ...

    @abc.abstractmethod
    def create(self, user: User) -> None:
        ...

    @abc.abstractmethod
    def update(self, user: User) -> None:
        ...

    @abc.abstractmethod
    def delete(self, user: User) -> None:
        ...

    # ------------------------------------------------------------------
    # Audit log
    # ------------------------------------------------------------------
    @abc.abstractmethod
    def create_log(self, user_id: int, action: str, details: str) -> Log:
        ...

    @abc.abstractmethod
    def get_logs_for_user(self, user_id: int) -> List[Log]:
        ...

    @abc.abstractmethod
    def get_all_logs(self) -> List[Log]:
        ...


class InMemoryDataContext(DataContext):
    """Process-local store for users plus an append-only audit log.

    Records are copied on the way in and out, so callers only change stored
    state through :meth:`update`. A single re-entrant lock guards the users,
    the logs and both id counters.
    """

    def __init__(self, *, seed: Optional[Iterable[User]] = None) -> None:
        self._users: Dict[int, User] = {}
        self._logs: List[Log] = []
        self._next_user_id = 1
        self._next_log_id = 1
        self._lock = threading.RLock()
        if seed is not None:
            seed_users(self, seed)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with self._lock:
            yield

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------
    def get_all(self) -> List[User]:
        with self._lock:
            return [replace(self._users[user_id]) for user_id in sorted(self._users)]

    def create(self, user: User) -> None:
        """Persist ``user``, assigning the next free id when it has none."""

        with self._lock:
            if user.id > 0:
                if user.id in self._users:
                    raise ValueError(f"A user with ID {user.id} already exists")
                if user.id < self._next_user_id:
                    raise ValueError(f"User ID {user.id} has already been used")
            else:
                user.id = self._next_user_id
            self._users[user.id] = replace(user)
            self._next_user_id = max(self._next_user_id, user.id + 1)

    def update(self, user: User) -> None:
        with self._lock:
            if user.id not in self._users:
                raise KeyError(f"Unknown user ID {user.id}")
            self._users[user.id] = replace(user)

    def delete(self, user: User) -> None:
        with self._lock:
            try:
                del self._users[user.id]
            except KeyError as exc:
                raise KeyError(f"Unknown user ID {user.id}") from exc

    # ------------------------------------------------------------------
    # Audit log
    # ------------------------------------------------------------------
    def create_log(self, user_id: int, action: str, details: str) -> Log:
        with self._lock:
            log = Log(
                id=self._next_log_id,
                user_id=user_id,
                action=action,
                details=details,
                timestamp=_current_timestamp(),
            )
            self._next_log_id += 1
            self._logs.append(log)
            return log

    def get_logs_for_user(self, user_id: int) -> List[Log]:
        with self._lock:
            return [log for log in self._logs if log.user_id == user_id]

    def get_all_logs(self) -> List[Log]:
        with self._lock:
            return list(self._logs)


def seed_users(context: DataContext, users: Iterable[User]) -> int:
    """Load ``users`` into ``context`` without writing audit entries."""

    count = 0
    with context.atomic():
        for user in users:
            context.create(replace(user))
            count += 1
    logger.info("Seeded %d user(s)", count)
    return count


__all__ = [
    "DataContext",
    "InMemoryDataContext",
    "default_seed_users",
    "seed_users",
    "years_before",
]
