from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime

from linkeun_dash.api.models import User

SESSION_ID_MARKER = "jwt"


@dataclass(frozen=True)
class SessionInfo:
    id: str
    user_id: int
    expires_at: datetime


@dataclass(frozen=True)
class RequestContext:
    """Identity for a single request.

    Built by the session middleware and passed explicitly to actions; actions that
    change identity return a new context rather than mutating this one.
    """

    user: User | None = None
    session: SessionInfo | None = None
    token: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def with_user(self, user: User) -> RequestContext:
        return replace(self, user=user)


ANONYMOUS = RequestContext()
