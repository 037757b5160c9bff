"""Core utilities for the user administration service."""

from __future__ import annotations

from typing import Any

from .database import DataContext, InMemoryDataContext, default_seed_users, seed_users
from .models import Log, User
from .service import UserNotFoundError, UserService


def create_application(*args: Any, **kwargs: Any):
    """Factory function that returns the web application."""

    from .application import create_application as _create_application

    return _create_application(*args, **kwargs)


__all__ = [
    "DataContext",
    "InMemoryDataContext",
    "Log",
    "User",
    "UserNotFoundError",
    "UserService",
    "create_application",
    "default_seed_users",
    "seed_users",
]
