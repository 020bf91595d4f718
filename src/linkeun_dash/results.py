from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from linkeun_dash.context import RequestContext


@dataclass(frozen=True)
class SessionCookie:
    token: str
    max_age: int


@dataclass(frozen=True)
class Redirect:
    location: str
    status_code: int = 303
    set_session: SessionCookie | None = None
    clear_session: bool = False
    context: RequestContext | None = None


@dataclass(frozen=True)
class Ok:
    data: dict[str, Any] = field(default_factory=dict)
    context: RequestContext | None = None


@dataclass(frozen=True)
class Fail:
    status_code: int
    body: dict[str, Any]


type ActionResult = Redirect | Ok | Fail


def fail(status_code: int, error: str, values: dict[str, Any] | None = None) -> Fail:
    body: dict[str, Any] = {"error": error}
    if values is not None:
        body["values"] = values
    return Fail(status_code=status_code, body=body)
