from __future__ import annotations

from linkeun_dash.api.client import BackendReply
from linkeun_dash.api.models import UserAuthData
from linkeun_dash.context import RequestContext
from linkeun_dash.results import Redirect, SessionCookie


def failure_status(reply: BackendReply, default: int = 400) -> int:
    """Status to report for a backend-reported failure.

    A 2xx reply with an embedded error falls back to the envelope code, then `default`.
    """

    if reply.status_code >= 400:
        return reply.status_code
    code = reply.envelope.code
    if code is not None and 400 <= code < 600:
        return code
    return default


def session_redirect(ctx: RequestContext, auth: UserAuthData, location: str = "/") -> Redirect:
    return Redirect(
        location=location,
        status_code=303,
        set_session=SessionCookie(token=auth.token, max_age=auth.expires_in),
        context=RequestContext(user=auth.user, session=ctx.session, token=auth.token),
    )
