from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class BackendModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ApiResponseMeta(BackendModel):
    model_config = ConfigDict(extra="allow")

    page: int | None = None
    per_page: int | None = None
    total: int | None = None
    has_next: bool | None = None
    has_prev: bool | None = None
    last_page: int | None = None


class ApiResponse[T](BackendModel):
    """Uniform envelope returned by every backend endpoint.

    All fields are optional: error replies are often partial.
    """

    code: int | None = None
    data: T | None = None
    error: Any | None = None
    message: str | None = None
    meta: ApiResponseMeta | None = None


class User(BackendModel):
    id: int
    username: str
    email: str
    name: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserAuthData(BackendModel):
    token: str
    expires_in: int
    user: User


class Link(BackendModel):
    id: int
    user_id: int | None = None
    original_url: str
    short_code: str
    custom_alias: str | None = None
    description: str | None = None
    is_active: bool = True
    is_private: bool = False
    clicks_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None
