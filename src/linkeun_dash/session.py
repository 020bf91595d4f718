"""Resolve the session cookie into a request identity.

The token is opaque to the dashboard: it is validated on every request by asking
the backend for the caller's profile. Every failure degrades to anonymous.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import ValidationError

from linkeun_dash.api.client import BackendReply, create_api_client
from linkeun_dash.api.models import ApiResponse, User
from linkeun_dash.config import DashConfig
from linkeun_dash.context import ANONYMOUS, SESSION_ID_MARKER, RequestContext, SessionInfo

logger = logging.getLogger(__name__)

PROFILE_PATH = "/api/users/profile"


@dataclass(frozen=True)
class SessionResolution:
    context: RequestContext
    clear_cookie: bool = False


def _reported_ttl(envelope: ApiResponse[Any]) -> int | None:
    candidates: list[Any] = []
    if isinstance(envelope.data, dict):
        candidates.append(envelope.data.get("expires_in"))
    if envelope.meta is not None:
        candidates.append((envelope.meta.model_extra or {}).get("expires_in"))

    for value in candidates:
        if isinstance(value, int) and not isinstance(value, bool) and value > 0:
            return value
    return None


async def resolve_session(
    token: str | None,
    config: DashConfig,
    *,
    now: datetime | None = None,
) -> SessionResolution:
    if not token:
        return SessionResolution(context=ANONYMOUS)

    async with create_api_client(config.api, token) as client:
        result = await client.call("GET", PROFILE_PATH)

    if not isinstance(result, BackendReply):
        logger.warning("Session validation failed: %s", type(result.error).__name__)
        return SessionResolution(context=ANONYMOUS, clear_cookie=True)

    if not result.succeeded or result.envelope.data is None:
        logger.info("Session token rejected by backend (status %s)", result.status_code)
        return SessionResolution(context=ANONYMOUS, clear_cookie=True)

    try:
        user = User.model_validate(result.envelope.data)
    except ValidationError:
        logger.warning("Profile response did not contain a valid user")
        return SessionResolution(context=ANONYMOUS, clear_cookie=True)

    ttl = _reported_ttl(result.envelope) or config.session.fallback_ttl_seconds
    issued = now or datetime.now(UTC)
    session = SessionInfo(
        id=SESSION_ID_MARKER,
        user_id=user.id,
        expires_at=issued + timedelta(seconds=ttl),
    )
    return SessionResolution(context=RequestContext(user=user, session=session, token=token))
