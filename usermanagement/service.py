"""Business rules for user records and their audit trail."""

from __future__ import annotations

import logging
from typing import List

from .database import DataContext
from .models import Log, User

logger = logging.getLogger("usermanagement.service")

ACTION_CREATED = "Created"
ACTION_UPDATED = "Updated"
ACTION_DELETED = "Deleted"


class UserNotFoundError(LookupError):
    """Raised when an id does not resolve to a live user."""

    def __init__(self, user_id: int) -> None:
        super().__init__(f"User with ID {user_id} not found.")
        self.user_id = user_id

    @property
    def message(self) -> str:
        return str(self)


class UserService:
    """Coordinate the user store and the audit log.

    Every mutation writes exactly one audit entry once the store change has
    succeeded. Both happen under the data context's lock.
    """

    def __init__(self, data: DataContext) -> None:
        self._data = data

    def get_all(self) -> List[User]:
        return self._data.get_all()

    def filter_by_active(self, is_active: bool) -> List[User]:
        """Return users whose active flag equals ``is_active``."""

        return [user for user in self._data.get_all() if user.is_active == is_active]

    def get_by_id(self, user_id: int) -> User:
        for user in self._data.get_all():
            if user.id == user_id:
                return user
        raise UserNotFoundError(user_id)

    def create(self, user: User) -> None:
        with self._data.atomic():
            self._data.create(user)
            self.create_log(user.id, ACTION_CREATED, f"User with {user.id} has been created")
        logger.info("Created user %s <%s>", user.id, user.email)

    def update(self, user: User) -> None:
        with self._data.atomic():
            self.get_by_id(user.id)
            self._data.update(user)
            self.create_log(user.id, ACTION_UPDATED, f"User with {user.id} has been updated")
        logger.info("Updated user %s", user.id)

    def delete(self, user_id: int) -> None:
        with self._data.atomic():
            user = self.get_by_id(user_id)
            self._data.delete(user)
            self.create_log(user_id, ACTION_DELETED, f"User with {user_id} has been deleted")
        logger.info("Deleted user %s", user_id)

    # ------------------------------------------------------------------
    # Audit log
    # ------------------------------------------------------------------
    def create_log(self, user_id: int, action: str, details: str) -> Log:
        return self._data.create_log(user_id, action, details)

    def get_logs_for_user(self, user_id: int) -> List[Log]:
        return self._data.get_logs_for_user(user_id)

    def get_all_logs(self) -> List[Log]:
        return self._data.get_all_logs()


__all__ = [
    "ACTION_CREATED",
    "ACTION_DELETED",
    "ACTION_UPDATED",
    "UserNotFoundError",
    "UserService",
]
