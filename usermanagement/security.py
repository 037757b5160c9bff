"""Anti-forgery helpers for the user administration forms."""
from __future__ import annotations

import secrets

from fastapi import HTTPException, Request, status

CSRF_SESSION_KEY = "csrf_token"
CSRF_FORM_FIELD = "csrf_token"


def get_csrf_token(request: Request) -> str:
    """Return the session's anti-forgery token, issuing one when missing."""

    token = request.session.get(CSRF_SESSION_KEY)
    if not isinstance(token, str) or not token:
        token = secrets.token_urlsafe(32)
        request.session[CSRF_SESSION_KEY] = token
    return token


def verify_csrf_token(request: Request, provided: str | None) -> None:
    expected = request.session.get(CSRF_SESSION_KEY)
    if not isinstance(expected, str) or not expected or not provided:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing anti-forgery token")
    if not secrets.compare_digest(provided, expected):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid anti-forgery token")


__all__ = ["CSRF_FORM_FIELD", "CSRF_SESSION_KEY", "get_csrf_token", "verify_csrf_token"]
