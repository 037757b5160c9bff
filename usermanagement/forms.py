"""Form models for creating and editing users."""

from __future__ import annotations

from datetime import date
from typing import Dict, Mapping, Optional, Tuple

from pydantic import BaseModel, EmailStr, Field, ValidationError, field_validator

from .models import User

FIELD_LABELS = {
    "forename": "First Name",
    "surname": "Last Name",
    "email": "Email",
    "date_of_birth": "Date of Birth",
    "is_active": "Is Active",
}

CHECKED_VALUES = {"on", "true", "1", "yes"}


def is_checked(value: object) -> bool:
    """Return whether a submitted checkbox value means ticked."""

    return str(value or "").strip().lower() in CHECKED_VALUES


class UserForm(BaseModel):
    forename: str = Field(..., min_length=1, max_length=100)
    surname: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    date_of_birth: Optional[date] = None
    is_active: bool = False

    @field_validator("forename", "surname", mode="before")
    @classmethod
    def _strip_names(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("email", mode="before")
    @classmethod
    def _strip_email(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("date_of_birth", mode="before")
    @classmethod
    def _blank_date(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @classmethod
    def from_user(cls, user: User) -> "UserForm":
        """Prefill a form from a stored record without validating it.

        Stored users may predate the form rules (seed files, direct service
        calls), so their values are shown as-is and checked on submit.
        """
        return cls.model_construct(
            forename=user.forename,
            surname=user.surname,
            email=user.email,
            date_of_birth=user.date_of_birth,
            is_active=user.is_active,
        )

    def to_user(self) -> User:
        return User(
            forename=self.forename,
            surname=self.surname,
            email=str(self.email),
            date_of_birth=self.date_of_birth,
            is_active=self.is_active,
        )

    def apply_to(self, user: User) -> User:
        """Overwrite the mutable fields of ``user``; the id is left alone."""

        user.forename = self.forename
        user.surname = self.surname
        user.email = str(self.email)
        user.date_of_birth = self.date_of_birth
        user.is_active = self.is_active
        return user


def _error_message(field: str, error_type: str) -> str:
    label = FIELD_LABELS.get(field, field)
    if error_type in {"missing", "string_too_short"}:
        return f"The {label} field is required."
    if field == "email":
        return f"The {label} field is not a valid e-mail address."
    if field == "date_of_birth":
        return f"The {label} field must be a valid date."
    return f"The {label} field is invalid."


def parse_user_form(data: Mapping[str, object]) -> Tuple[Optional[UserForm], Dict[str, str]]:
    """Validate submitted form data.

    Returns the parsed form and an empty error mapping on success, or
    ``None`` and a mapping of field name to message when validation fails.
    """

    values = {
        "forename": data.get("forename", ""),
        "surname": data.get("surname", ""),
        "email": data.get("email", ""),
        "date_of_birth": data.get("date_of_birth") or None,
        "is_active": is_checked(data.get("is_active")),
    }
    # Empty email must report as required rather than malformed
    if not str(values["email"]).strip():
        values.pop("email")

    try:
        return UserForm(**values), {}
    except ValidationError as exc:
        errors: Dict[str, str] = {}
        for error in exc.errors():
            field = str(error["loc"][0]) if error.get("loc") else "__all__"
            errors.setdefault(field, _error_message(field, error["type"]))
        return None, errors


__all__ = ["CHECKED_VALUES", "FIELD_LABELS", "UserForm", "is_checked", "parse_user_form"]
