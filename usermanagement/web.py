"""Browser-based administration interface for user records."""
from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from fastapi import FastAPI, Query, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.middleware.sessions import SessionMiddleware

from .forms import FIELD_LABELS, UserForm, is_checked, parse_user_form
from .security import CSRF_FORM_FIELD, get_csrf_token, verify_csrf_token
from .service import UserNotFoundError, UserService
from .views import build_log_history, build_user_list, build_user_logs, to_detail

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

FORM_ERROR_KEY = "__all__"

logger = logging.getLogger("usermanagement.web")


def _format_date(value: Optional[date]) -> str:
    if value is None:
        return ""
    return value.strftime("%d %b %Y")


def _form_values(form: Optional[UserForm] = None) -> Dict[str, object]:
    if form is None:
        return {
            "forename": "",
            "surname": "",
            "email": "",
            "date_of_birth": "",
            "is_active": False,
        }
    return {
        "forename": form.forename,
        "surname": form.surname,
        "email": str(form.email),
        "date_of_birth": form.date_of_birth.isoformat() if form.date_of_birth else "",
        "is_active": form.is_active,
    }


def _submitted_values(data: Mapping[str, object]) -> Dict[str, object]:
    return {
        "forename": str(data.get("forename", "")),
        "surname": str(data.get("surname", "")),
        "email": str(data.get("email", "")),
        "date_of_birth": str(data.get("date_of_birth", "")),
        "is_active": is_checked(data.get("is_active")),
    }


def create_app(
    *,
    service: UserService,
    session_secret: str,
    secure_cookies: bool = False,
) -> FastAPI:
    """Create the user administration web application."""

    if not session_secret:
        raise RuntimeError("A session secret must be configured to use the web interface")

    app = FastAPI(
        title="User Management",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.service = service

    app.add_middleware(
        SessionMiddleware,
        secret_key=session_secret,
        session_cookie="usermanagement_session",
        https_only=secure_cookies,
        same_site="lax",
    )

    templates = Jinja2Templates(directory=str(TEMPLATE_DIR))
    templates.env.filters["display_date"] = _format_date
    templates.env.globals["field_labels"] = FIELD_LABELS

    def _flash(request: Request, message: str, *, category: str = "info") -> None:
        messages = request.session.get("flash_messages")
        if not isinstance(messages, list):
            messages = []
        messages.append({"message": message, "category": category})
        request.session["flash_messages"] = messages

    def _consume_flash(request: Request) -> List[Dict[str, str]]:
        messages = request.session.pop("flash_messages", [])
        if isinstance(messages, list):
            return messages
        return []

    def _render(
        request: Request,
        template: str,
        context: Optional[Dict[str, object]] = None,
        *,
        status_code: int = status.HTTP_200_OK,
    ) -> HTMLResponse:
        payload: Dict[str, object] = {
            "csrf_field": CSRF_FORM_FIELD,
            "csrf_token": get_csrf_token(request),
        }
        if context:
            payload.update(context)
        return templates.TemplateResponse(request, template, payload, status_code=status_code)

    def _redirect_to_list(request: Request) -> RedirectResponse:
        return RedirectResponse(
            request.url_for("list_users"),
            status_code=status.HTTP_303_SEE_OTHER,
        )

    def _render_form(
        request: Request,
        *,
        mode: str,
        values: Dict[str, object],
        errors: Optional[Dict[str, str]] = None,
        user_id: Optional[int] = None,
        status_code: int = status.HTTP_200_OK,
    ) -> HTMLResponse:
        return _render(
            request,
            "users/form.html",
            {
                "mode": mode,
                "values": values,
                "errors": errors or {},
                "form_error": (errors or {}).get(FORM_ERROR_KEY),
                "user_id": user_id,
            },
            status_code=status_code,
        )

    @app.exception_handler(UserNotFoundError)
    async def user_not_found(request: Request, exc: UserNotFoundError):
        logger.info("Request for missing user %s", exc.user_id)
        return _render(
            request,
            "not_found.html",
            {"user_id": exc.user_id},
            status_code=status.HTTP_404_NOT_FOUND,
        )

    @app.get("/", response_class=HTMLResponse)
    async def root(request: Request):
        return _redirect_to_list(request)

    @app.get("/users", response_class=HTMLResponse, name="list_users")
    async def list_users(request: Request, active_filter: Optional[str] = Query(None, alias="filter")):
        try:
            model = build_user_list(service, active_filter)
        except Exception:
            logger.exception("Failed to list users")
            return _render(request, "error.html", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

        return _render(
            request,
            "users/list.html",
            {"model": model, "messages": _consume_flash(request)},
        )

    @app.get("/users/create", response_class=HTMLResponse, name="create_user_form")
    async def create_user_form(request: Request):
        return _render_form(request, mode="create", values=_form_values())

    @app.post("/users/create", response_class=HTMLResponse, name="create_user")
    async def create_user(request: Request):
        data = await request.form()
        verify_csrf_token(request, data.get(CSRF_FORM_FIELD))

        form, errors = parse_user_form(data)
        if form is None:
            return _render_form(
                request,
                mode="create",
                values=_submitted_values(data),
                errors=errors,
            )

        try:
            service.create(form.to_user())
        except Exception:
            logger.exception("Failed to create user %s", form.email)
            return _render_form(
                request,
                mode="create",
                values=_form_values(form),
                errors={FORM_ERROR_KEY: "An error occurred while creating the user."},
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        _flash(request, "User created successfully.", category="success")
        return _redirect_to_list(request)

    @app.get("/users/edit/{user_id}", response_class=HTMLResponse, name="edit_user_form")
    async def edit_user_form(request: Request, user_id: int):
        user = service.get_by_id(user_id)
        return _render_form(
            request,
            mode="edit",
            values=_form_values(UserForm.from_user(user)),
            user_id=user.id,
        )

    @app.post("/users/edit/{user_id}", response_class=HTMLResponse, name="edit_user")
    async def edit_user(request: Request, user_id: int):
        data = await request.form()
        verify_csrf_token(request, data.get(CSRF_FORM_FIELD))

        form, errors = parse_user_form(data)
        if form is None:
            return _render_form(
                request,
                mode="edit",
                values=_submitted_values(data),
                errors=errors,
                user_id=user_id,
            )

        try:
            user = service.get_by_id(user_id)
            service.update(form.apply_to(user))
        except UserNotFoundError:
            raise
        except Exception:
            logger.exception("Failed to update user %s", user_id)
            return _render_form(
                request,
                mode="edit",
                values=_form_values(form),
                errors={FORM_ERROR_KEY: "An error occurred while updating the user."},
                user_id=user_id,
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        _flash(request, "User updated successfully.", category="success")
        return _redirect_to_list(request)

    @app.get("/users/view/{user_id}", response_class=HTMLResponse, name="view_user")
    async def view_user(request: Request, user_id: int):
        user = service.get_by_id(user_id)
        return _render(request, "users/view.html", {"user": to_detail(user)})

    @app.get("/users/delete/{user_id}", response_class=HTMLResponse, name="delete_user_form")
    async def delete_user_form(request: Request, user_id: int):
        user = service.get_by_id(user_id)
        return _render(request, "users/delete.html", {"user": to_detail(user)})

    @app.post("/users/delete/{user_id}", name="delete_user")
    async def delete_user(request: Request, user_id: int):
        data = await request.form()
        verify_csrf_token(request, data.get(CSRF_FORM_FIELD))

        try:
            service.delete(user_id)
        except UserNotFoundError as exc:
            logger.warning("Delete requested for missing user %s", exc.user_id)
            _flash(request, "An error occurred while deleting the user.", category="error")
        except Exception:
            logger.exception("Failed to delete user %s", user_id)
            _flash(request, "An error occurred while deleting the user.", category="error")
        else:
            _flash(request, "User deleted successfully.", category="success")
        return _redirect_to_list(request)

    @app.get("/users/{user_id}/logs", response_class=HTMLResponse, name="user_logs")
    async def user_logs(request: Request, user_id: int):
        model = build_user_logs(service, user_id)
        return _render(request, "users/logs.html", {"model": model})

    @app.get("/logs", response_class=HTMLResponse, name="all_logs")
    async def all_logs(request: Request):
        return _render(request, "logs.html", {"logs": build_log_history(service)})

    return app


__all__ = ["create_app"]
