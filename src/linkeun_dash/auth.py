from __future__ import annotations

from typing import Final

from fastapi import Request
from starlette.responses import Response

from linkeun_dash.config import DashConfig
from linkeun_dash.results import SessionCookie

SESSION_COOKIE: Final[str] = "auth-session"
COOKIE_PATH: Final[str] = "/"


def cookie_name(config: DashConfig | None) -> str:
    if config is None:
        return SESSION_COOKIE
    return config.session.cookie_name


def extract_session_token(request: Request, config: DashConfig | None = None) -> str | None:
    raw = request.cookies.get(cookie_name(config))
    if not raw:
        return None
    return raw.strip() or None


def set_session_cookie(response: Response, cookie: SessionCookie, config: DashConfig) -> None:
    response.set_cookie(
        cookie_name(config),
        cookie.token,
        max_age=cookie.max_age,
        path=COOKIE_PATH,
        httponly=True,
        samesite="strict",
        secure=config.is_production,
    )


def delete_session_cookie(response: Response, config: DashConfig) -> None:
    response.delete_cookie(
        cookie_name(config),
        path=COOKIE_PATH,
        httponly=True,
        samesite="strict",
        secure=config.is_production,
    )


def is_exempt_path(path: str) -> bool:
    """Paths served without resolving the session (no backend round-trip)."""

    if path == "/healthz":
        return True
    if path == "/favicon.ico":
        return True
    if path.startswith("/static/"):
        return True
    return False
