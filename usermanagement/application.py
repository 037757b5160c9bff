"""Application factory that wires the store, the service and the web UI."""
from __future__ import annotations

import logging
from typing import List, Mapping, Optional

from fastapi import FastAPI

from .config import Settings, load_seed_users, load_settings
from .database import DataContext, InMemoryDataContext, default_seed_users
from .models import User
from .service import UserService
from .web import create_app as create_web_app

logger = logging.getLogger("usermanagement.application")


def resolve_seed(settings: Settings) -> Optional[List[User]]:
    """Return the users a fresh store should start with, if any."""

    if not settings.seed_enabled:
        return None
    if settings.seed_path is not None:
        logger.info("Loading seed users from %s", settings.seed_path)
        return load_seed_users(settings.seed_path)
    return default_seed_users()


def create_data_context(settings: Settings) -> DataContext:
    return InMemoryDataContext(seed=resolve_seed(settings))


def create_application(
    *,
    settings: Optional[Settings] = None,
    data: Optional[DataContext] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> FastAPI:
    """Create the ASGI application."""

    if settings is None:
        settings = load_settings(environ)
    if data is None:
        data = create_data_context(settings)

    service = UserService(data)
    app = create_web_app(
        service=service,
        session_secret=settings.session_secret,
        secure_cookies=settings.secure_cookies,
    )
    app.state.settings = settings
    app.state.data = data
    return app


__all__ = ["create_application", "create_data_context", "resolve_seed"]
