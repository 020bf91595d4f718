"""Form schemas for the form-action adapters.

Each schema validates the raw submitted fields before anything is sent to the
backend. The first validation message is what the page shows.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar

from pydantic import (
    AnyHttpUrl,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic_core import PydanticCustomError

SECRET_FIELDS = frozenset({"password", "currentPassword", "newPassword", "confirmPassword"})
MIN_PASSWORD_LENGTH = 6

_URL_ADAPTER = TypeAdapter(AnyHttpUrl)


def public_values(data: Mapping[str, Any]) -> dict[str, Any]:
    """Submitted text fields safe to echo back into the form."""

    return {k: v for k, v in data.items() if k not in SECRET_FIELDS and isinstance(v, str)}


def first_error_message(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid form submission"
    return str(errors[0]["msg"])


def _check_url(value: str) -> str:
    try:
        _URL_ADAPTER.validate_python(value)
    except ValidationError:
        raise PydanticCustomError("url", "Please enter a valid URL") from None
    # Keep what the user typed; AnyHttpUrl normalizes (e.g. trailing slash).
    return value


class FormModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    required_fields: ClassVar[tuple[str, ...]] = ()
    missing_message: ClassVar[str] = "Missing required fields"

    @model_validator(mode="before")
    @classmethod
    def _check_required(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            for name in cls.required_fields:
                value = data.get(name)
                if value is None or value == "":
                    raise PydanticCustomError("missing_fields", cls.missing_message)
        return data


class LoginForm(FormModel):
    required_fields = ("username", "password")
    missing_message = "Missing username or password"

    username: str
    password: str


class RegisterForm(FormModel):
    required_fields = ("email", "username", "name", "password")

    email: str
    username: str
    name: str
    password: str


class CreateLinkForm(FormModel):
    required_fields = ("original_url",)
    missing_message = "Please enter a valid URL"

    original_url: str
    custom_alias: str | None = None
    password: str | None = None
    description: str | None = None

    @field_validator("original_url")
    @classmethod
    def _validate_url(cls, value: str) -> str:
        return _check_url(value)


class UpdateLinkForm(FormModel):
    original_url: str | None = None
    custom_alias: str | None = None
    password: str | None = None
    description: str | None = None

    @field_validator("original_url")
    @classmethod
    def _validate_url(cls, value: str | None) -> str | None:
        # Only an absent field means "leave unchanged"; a submitted blank is invalid.
        if value is None:
            return None
        return _check_url(value)


class ProfileForm(FormModel):
    required_fields = ("name", "username")
    missing_message = "Name and username are required"

    name: str
    username: str


class PasswordForm(FormModel):
    required_fields = ("currentPassword", "newPassword", "confirmPassword")
    missing_message = "All password fields are required"

    current_password: str = Field(alias="currentPassword")
    new_password: str = Field(alias="newPassword")
    confirm_password: str = Field(alias="confirmPassword")

    @model_validator(mode="after")
    def _check_new_password(self) -> PasswordForm:
        if self.new_password != self.confirm_password:
            raise PydanticCustomError(
                "password_mismatch", "New password and confirmation do not match"
            )
        if len(self.new_password) < MIN_PASSWORD_LENGTH:
            raise PydanticCustomError(
                "password_too_short",
                "New password must be at least {min_length} characters long",
                {"min_length": MIN_PASSWORD_LENGTH},
            )
        return self
