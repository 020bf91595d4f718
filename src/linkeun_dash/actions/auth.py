"""Login, registration, e-mail verification and logout."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

from pydantic import ValidationError

from linkeun_dash.actions.common import failure_status, session_redirect
from linkeun_dash.actions.forms import LoginForm, RegisterForm, first_error_message, public_values
from linkeun_dash.api.client import BackendReply, TransportFailure, create_api_client
from linkeun_dash.api.models import UserAuthData
from linkeun_dash.config import DashConfig
from linkeun_dash.context import RequestContext
from linkeun_dash.results import ActionResult, Fail, Ok, Redirect, fail

logger = logging.getLogger(__name__)

LOGIN_PATH = "/api/auth/login"
REGISTER_PATH = "/api/auth/register"
VERIFY_PATH = "/api/auth/verify/{token}"
LOGOUT_PATH = "/api/auth/logout"

DEFAULT_REGISTER_MESSAGE = (
    "Registration successful! Please check your email to verify your account."
)
VERIFY_TRANSPORT_MESSAGE = "Failed to verify token. Please try again."


def redirect_if_authenticated(ctx: RequestContext) -> Redirect | None:
    if ctx.is_authenticated:
        return Redirect(location="/", status_code=302)
    return None


async def login(data: Mapping[str, Any], ctx: RequestContext, config: DashConfig) -> ActionResult:
    values = public_values(data)
    try:
        form = LoginForm.model_validate(data)
    except ValidationError as exc:
        return fail(400, first_error_message(exc), values)

    async with create_api_client(config.api) as client:
        result = await client.call(
            "POST", LOGIN_PATH, json={"username": form.username, "password": form.password}
        )

    if isinstance(result, TransportFailure):
        logger.error("Login request failed", exc_info=result.error)
        return fail(500, "An unexpected error occurred during login", values)

    if not result.succeeded:
        return fail(failure_status(result), result.failure_message("Login failed"), values)

    try:
        auth = UserAuthData.model_validate(result.envelope.data)
    except ValidationError:
        logger.exception("Login response did not contain session data")
        return fail(500, "An unexpected error occurred during login", values)

    logger.info("User %s logged in", auth.user.id)
    return session_redirect(ctx, auth)


async def register(
    data: Mapping[str, Any], ctx: RequestContext, config: DashConfig
) -> ActionResult:
    values = public_values(data)
    try:
        form = RegisterForm.model_validate(data)
    except ValidationError as exc:
        return fail(400, first_error_message(exc), values)

    async with create_api_client(config.api) as client:
        result = await client.call("POST", REGISTER_PATH, json=form.model_dump())

    if isinstance(result, TransportFailure):
        logger.error("Registration request failed", exc_info=result.error)
        return fail(500, "An unexpected error occurred during registration", values)

    if not result.succeeded:
        return fail(
            failure_status(result), result.failure_message("Registration failed"), values
        )

    # No session yet: the account must be verified by e-mail first.
    return Ok(
        data={
            "success": True,
            "message": result.envelope.message or DEFAULT_REGISTER_MESSAGE,
            "user": result.envelope.data,
        }
    )


async def verify_token(token: str, ctx: RequestContext, config: DashConfig) -> ActionResult:
    guard = redirect_if_authenticated(ctx)
    if guard is not None:
        return guard

    token = (token or "").strip()
    if not token:
        return Fail(status_code=400, body={"error": "Token is required"})

    path = VERIFY_PATH.format(token=quote(token, safe=""))
    async with create_api_client(config.api) as client:
        result = await client.call("GET", path)

    if isinstance(result, TransportFailure):
        logger.error("Verification request failed", exc_info=result.error)
        return Ok(data={"success": False, "message": VERIFY_TRANSPORT_MESSAGE, "status_code": 500})

    if _verified(result):
        try:
            auth = UserAuthData.model_validate(result.envelope.data)
        except ValidationError:
            logger.exception("Verification response did not contain session data")
        else:
            logger.info("User %s verified and logged in", auth.user.id)
            return session_redirect(ctx, auth)

    return Ok(
        data={
            "success": False,
            "message": result.envelope.message,
            "status_code": result.envelope.code or result.status_code,
        }
    )


def _verified(reply: BackendReply) -> bool:
    return (
        200 <= reply.status_code < 300
        and reply.envelope.code == 200
        and bool(reply.envelope.data)
    )


async def logout(ctx: RequestContext, config: DashConfig) -> ActionResult:
    """Clear the session cookie; tell the backend on a best-effort basis."""

    if ctx.token:
        async with create_api_client(config.api, ctx.token) as client:
            result = await client.call("POST", LOGOUT_PATH)
        if isinstance(result, TransportFailure):
            logger.error("Logout API error", exc_info=result.error)
        elif not result.succeeded:
            logger.warning("Logout API returned status %s", result.status_code)

    return Redirect(location="/auth/login", status_code=302, clear_session=True)
