"""Pydantic request/response schemas for pt_gateway.

Field rules mirror the registration form; every violated rule is reported
in one response (see the RequestValidationError handler in src.main).
"""

import re
from datetime import date
from typing import Any

from pydantic import (
    EmailStr,
    Field,
    ModelWrapValidatorHandler,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic_core import InitErrorDetails, PydanticCustomError

from src.pt_common.datetime_utils import age_on, utc_now
from src.pt_common.response import CamelModel, Money

MINIMUM_AGE = 18
_NAME_RE = re.compile(r"^[a-zA-Z\s'-]+$")
_PASSWORD_SPECIALS = "@$!%*?&"


class RegisterRequest(CamelModel):
    username: str = Field(..., min_length=3, max_length=30, pattern=r"^[a-zA-Z0-9_]+$")
    email: EmailStr
    first_name: str = Field(..., max_length=50)
    last_name: str = Field(..., max_length=50)
    date_of_birth: date
    password: str = Field(..., min_length=8, max_length=128)
    confirm_password: str

    @field_validator("username", "first_name", "last_name", mode="before")
    @classmethod
    def strip_whitespace(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v

    @field_validator("first_name", "last_name")
    @classmethod
    def name_characters(cls, v: str) -> str:
        if not v:
            raise ValueError("Name is required")
        if not _NAME_RE.match(v):
            raise ValueError("Name can only contain letters, spaces, hyphens, and apostrophes")
        return v

    @field_validator("date_of_birth")
    @classmethod
    def adult(cls, v: date) -> date:
        today = utc_now().date()
        if v > today:
            raise ValueError("Date of birth cannot be in the future")
        if age_on(v, today) < MINIMUM_AGE:
            raise ValueError("You must be at least 18 years old to use this service")
        return v

    @field_validator("password")
    @classmethod
    def password_complexity(cls, v: str) -> str:
        """Enforce: uppercase, lowercase, digit and one of @$!%*?&."""
        missing = []
        if not re.search(r"[A-Z]", v):
            missing.append("one uppercase letter")
        if not re.search(r"[a-z]", v):
            missing.append("one lowercase letter")
        if not re.search(r"\d", v):
            missing.append("one number")
        if not any(ch in _PASSWORD_SPECIALS for ch in v):
            missing.append("one special character")
        if missing:
            raise ValueError("Password must contain at least " + ", ".join(missing))
        return v

    @model_validator(mode="wrap")
    @classmethod
    def passwords_match(
        cls, data: Any, handler: ModelWrapValidatorHandler["RegisterRequest"]
    ) -> "RegisterRequest":
        """Report a confirmation mismatch even when other fields failed too."""
        try:
            model = handler(data)
        except ValidationError as exc:
            if not _confirmation_differs(data):
                raise
            line_errors: list[InitErrorDetails] = [
                {
                    "type": PydanticCustomError(err["type"], err["msg"]),
                    "loc": err["loc"],
                    "input": err["input"],
                }
                for err in exc.errors()
            ]
            line_errors.append(
                _mismatch_error(_raw_field(data, "confirmPassword", "confirm_password"))
            )
            raise ValidationError.from_exception_data(cls.__name__, line_errors) from None

        if model.password != model.confirm_password:
            raise ValidationError.from_exception_data(
                cls.__name__, [_mismatch_error(model.confirm_password)]
            )
        return model


def _raw_field(data: Any, alias: str, name: str) -> Any:
    if not isinstance(data, dict):
        return None
    return data.get(alias, data.get(name))


def _confirmation_differs(data: Any) -> bool:
    password = _raw_field(data, "password", "password")
    confirm = _raw_field(data, "confirmPassword", "confirm_password")
    return isinstance(password, str) and isinstance(confirm, str) and password != confirm


def _mismatch_error(confirm: Any) -> InitErrorDetails:
    return {
        "type": PydanticCustomError("password_mismatch", "Passwords do not match"),
        "loc": ("confirmPassword",),
        "input": confirm,
    }


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserInfo(CamelModel):
    """Minimal user info embedded in auth responses."""

    id: str
    username: str
    email: str
    first_name: str
    last_name: str


class AuthResponse(CamelModel):
    token: str
    token_type: str = "Bearer"
    expires_in: int
    user: UserInfo


class MeResponse(UserInfo):
    date_of_birth: date
    balance: Money
    created_at: str
    last_login: str | None
