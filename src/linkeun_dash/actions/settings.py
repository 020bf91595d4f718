"""Profile and password changes for the signed-in user."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from linkeun_dash.actions.common import failure_status
from linkeun_dash.actions.forms import PasswordForm, ProfileForm, first_error_message, public_values
from linkeun_dash.api.client import TransportFailure, create_api_client
from linkeun_dash.config import DashConfig
from linkeun_dash.context import RequestContext
from linkeun_dash.results import ActionResult, Ok, Redirect, fail

logger = logging.getLogger(__name__)

PROFILE_PATH = "/api/users/profile"
CHANGE_PASSWORD_PATH = "/api/users/change-password"


def require_login(ctx: RequestContext) -> Redirect | None:
    if not ctx.is_authenticated:
        return Redirect(location="/auth/login", status_code=302)
    return None


async def update_profile(
    data: Mapping[str, Any], ctx: RequestContext, config: DashConfig
) -> ActionResult:
    if ctx.user is None:
        return fail(401, "Authentication required")

    values = public_values(data)
    try:
        form = ProfileForm.model_validate(data)
    except ValidationError as exc:
        return fail(400, first_error_message(exc), values)

    if not ctx.token:
        return fail(401, "Authentication token missing")

    async with create_api_client(config.api, ctx.token) as client:
        result = await client.call(
            "PUT", PROFILE_PATH, json={"name": form.name, "username": form.username}
        )

    if isinstance(result, TransportFailure):
        logger.error("Profile update error", exc_info=result.error)
        return fail(500, "An unexpected error occurred while updating profile", values)

    if not result.succeeded:
        return fail(
            failure_status(result), result.failure_message("Failed to update profile"), values
        )

    # Reflect the change on this response; the next request re-reads the profile.
    user = ctx.user.model_copy(update={"name": form.name, "username": form.username})
    return Ok(
        data={"success": True, "message": "Profile updated successfully!"},
        context=ctx.with_user(user),
    )


async def update_password(
    data: Mapping[str, Any], ctx: RequestContext, config: DashConfig
) -> ActionResult:
    if ctx.user is None:
        return fail(401, "Authentication required")

    try:
        form = PasswordForm.model_validate(data)
    except ValidationError as exc:
        return fail(400, first_error_message(exc), {})

    if not ctx.token:
        return fail(401, "Authentication token missing")

    async with create_api_client(config.api, ctx.token) as client:
        result = await client.call(
            "PUT",
            CHANGE_PASSWORD_PATH,
            json={"currentPassword": form.current_password, "newPassword": form.new_password},
        )

    if isinstance(result, TransportFailure):
        logger.error("Password update error", exc_info=result.error)
        return fail(500, "An unexpected error occurred while updating password", {})

    if not result.succeeded:
        return fail(
            failure_status(result), result.failure_message("Failed to update password"), {}
        )

    return Ok(data={"success": True, "message": "Password updated successfully!"})
