"""Configuration management for the user administration service."""
from __future__ import annotations

import logging
import os
import secrets
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Dict, List, Mapping, Optional

import yaml

from .database import years_before
from .models import User

logger = logging.getLogger("usermanagement.config")

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_flag(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


@dataclass(frozen=True)
class SeedUser:
    """A user entry read from a seed file."""

    forename: str
    surname: str
    email: str
    is_active: bool = True
    date_of_birth: Optional[date] = None
    age: Optional[int] = None

    @staticmethod
    def from_dict(data: Dict[str, object]) -> "SeedUser":
        """Create a :class:`SeedUser` from raw dictionary data."""
        required_fields = {"forename", "surname", "email"}
        missing = required_fields - data.keys()
        if missing:
            raise ValueError(f"Missing required seed user fields: {', '.join(sorted(missing))}")

        raw_dob = data.get("date_of_birth")
        if raw_dob is None or isinstance(raw_dob, date):
            date_of_birth = raw_dob
        else:
            try:
                date_of_birth = date.fromisoformat(str(raw_dob))
            except ValueError as exc:
                raise ValueError(f"Invalid date_of_birth '{raw_dob}' for {data['email']}") from exc

        age = data.get("age")
        return SeedUser(
            forename=str(data["forename"]),
            surname=str(data["surname"]),
            email=str(data["email"]),
            is_active=bool(data.get("is_active", True)),
            date_of_birth=date_of_birth,
            age=int(age) if age is not None else None,
        )

    def to_user(self, today: Optional[date] = None) -> User:
        date_of_birth = self.date_of_birth
        if date_of_birth is None and self.age is not None:
            date_of_birth = years_before(today or date.today(), self.age)
        return User(
            forename=self.forename,
            surname=self.surname,
            email=self.email,
            is_active=self.is_active,
            date_of_birth=date_of_birth,
        )


def load_seed_users(seed_path: Path) -> List[User]:
    """Load seed users from a YAML file."""
    with seed_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    if not isinstance(raw, dict):
        raise ValueError("Seed file must be a mapping with a 'users' key")
    users_raw = raw.get("users")
    if users_raw is None:
        raise ValueError("Seed file must define a list of users under the 'users' key")
    if not isinstance(users_raw, list):
        raise ValueError("The 'users' key of a seed file must hold a list")

    users: List[User] = []
    for index, item in enumerate(users_raw, start=1):
        if not isinstance(item, dict):
            raise ValueError(f"Seed user #{index} must be a mapping of field names to values")
        users.append(SeedUser.from_dict(item).to_user())
    return users


def resolve_seed_path(env_value: Optional[str]) -> Optional[Path]:
    """Resolve the path to an optional seed file."""
    if not env_value:
        return None
    return Path(env_value).expanduser().resolve(strict=False)


@dataclass(frozen=True)
class Settings:
    """Runtime settings read from the environment."""

    session_secret: str
    seed_enabled: bool = True
    seed_path: Optional[Path] = None
    secure_cookies: bool = False


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ

    session_secret = env.get("USERMANAGEMENT_SESSION_SECRET", "").strip()
    if not session_secret:
        logger.warning(
            "USERMANAGEMENT_SESSION_SECRET is not set; sessions will not survive a restart"
        )
        session_secret = secrets.token_urlsafe(32)

    return Settings(
        session_secret=session_secret,
        seed_enabled=_env_flag(env.get("USERMANAGEMENT_SEED"), True),
        seed_path=resolve_seed_path(env.get("USERMANAGEMENT_SEED_FILE")),
        secure_cookies=_env_flag(env.get("USERMANAGEMENT_SESSION_SECURE"), False),
    )


__all__ = ["SeedUser", "Settings", "load_seed_users", "load_settings", "resolve_seed_path"]
