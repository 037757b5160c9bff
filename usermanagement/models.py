"""Domain records for the user administration service."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass
class User:
    """A user record held by the data context.

    ``id`` is ``0`` until the store assigns one on creation.
    """

    forename: str
    surname: str
    email: str
    date_of_birth: Optional[date] = None
    is_active: bool = True
    id: int = 0

    @property
    def full_name(self) -> str:
        return f"{self.forename} {self.surname}".strip()


@dataclass(frozen=True)
class Log:
    """An audit entry written whenever a user record changes."""

    id: int
    user_id: int
    action: str
    details: str
    timestamp: datetime


__all__ = ["Log", "User"]
