"""Canned backend payloads shared by the tests."""

from __future__ import annotations

from typing import Any

BACKEND = "http://backend.test"

USER: dict[str, Any] = {
    "id": 7,
    "username": "ada",
    "email": "ada@example.com",
    "name": "Ada Lovelace",
    "created_at": "2025-01-01T00:00:00Z",
    "updated_at": "2025-01-02T00:00:00Z",
}

LINK: dict[str, Any] = {
    "id": 11,
    "user_id": 7,
    "original_url": "https://example.com/docs",
    "short_code": "abc123",
    "custom_alias": None,
    "description": "Docs",
    "is_active": True,
    "is_private": False,
    "clicks_count": 4,
    "created_at": "2025-01-01T00:00:00Z",
    "updated_at": "2025-01-03T00:00:00Z",
    "deleted_at": None,
}


def envelope(
    data: Any = None,
    *,
    code: int = 200,
    error: Any = None,
    message: str = "OK",
    meta: dict[str, Any] | None = None,
) -> dict[str, Any]:
    return {"code": code, "data": data, "error": error, "message": message, "meta": meta}
