"""Create and update short links."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from linkeun_dash.actions.common import failure_status
from linkeun_dash.actions.forms import (
    CreateLinkForm,
    UpdateLinkForm,
    first_error_message,
    public_values,
)
from linkeun_dash.api.client import TransportFailure, create_api_client
from linkeun_dash.config import DashConfig
from linkeun_dash.context import RequestContext
from linkeun_dash.results import ActionResult, Ok, Redirect, fail

logger = logging.getLogger(__name__)

LINKS_PATH = "/api/s/"
LINK_PATH = "/api/s/{link_id}"
LINK_DETAIL_PATH = "/api/s/{link_id}/detail"


def _filled(value: str | None) -> bool:
    return value is not None and value.strip() != ""


def build_create_payload(form: CreateLinkForm) -> dict[str, Any]:
    payload: dict[str, Any] = {"original_url": form.original_url}
    for name in ("custom_alias", "password", "description"):
        value = getattr(form, name)
        if _filled(value):
            payload[name] = value
    return payload


def build_update_payload(form: UpdateLinkForm) -> dict[str, Any]:
    """Partial update body.

    Absent password/description are left out (untouched); blank ones are sent as
    null, which clears them.
    """

    payload: dict[str, Any] = {}
    if form.original_url is not None:
        payload["original_url"] = form.original_url
    if _filled(form.custom_alias):
        payload["custom_alias"] = form.custom_alias
    for name in ("password", "description"):
        if name not in form.model_fields_set:
            continue
        value = getattr(form, name)
        payload[name] = value if _filled(value) else None
    return payload


async def create_link(
    data: Mapping[str, Any], ctx: RequestContext, config: DashConfig
) -> ActionResult:
    values = public_values(data)
    try:
        form = CreateLinkForm.model_validate(data)
    except ValidationError as exc:
        return fail(400, first_error_message(exc), values)

    if not ctx.token:
        return fail(401, "You must be logged in to create links", values)

    async with create_api_client(config.api, ctx.token) as client:
        result = await client.call("POST", LINKS_PATH, json=build_create_payload(form))

    if isinstance(result, TransportFailure):
        logger.error("Error creating link", exc_info=result.error)
        return fail(500, "Network error: Failed to create link", values)

    if not result.succeeded:
        return fail(
            failure_status(result), result.failure_message("Failed to create link"), values
        )

    return Ok(data={"success": True, "link": result.envelope.data})


async def update_link(
    link_id: str, data: Mapping[str, Any], ctx: RequestContext, config: DashConfig
) -> ActionResult:
    values = public_values(data)
    try:
        form = UpdateLinkForm.model_validate(data)
    except ValidationError as exc:
        return fail(400, first_error_message(exc), values)

    if not ctx.token:
        return fail(401, "You must be logged in to update links", values)

    async with create_api_client(config.api, ctx.token) as client:
        result = await client.call(
            "PATCH", LINK_PATH.format(link_id=link_id), json=build_update_payload(form)
        )

    if isinstance(result, TransportFailure):
        logger.error("Error updating link %s", link_id, exc_info=result.error)
        return fail(500, "Network error: Failed to update link", values)

    if not result.succeeded:
        return fail(
            failure_status(result), result.failure_message("Failed to update link"), values
        )

    return Ok(data={"success": True, "link": result.envelope.data})


async def load_link_for_update(
    link_id: str, ctx: RequestContext, config: DashConfig
) -> ActionResult:
    if not ctx.is_authenticated or not ctx.token:
        return Ok(data={"not_logged_in": True})

    async with create_api_client(config.api, ctx.token) as client:
        result = await client.call("GET", LINK_DETAIL_PATH.format(link_id=link_id))

    if isinstance(result, TransportFailure):
        logger.error("Error fetching link %s", link_id, exc_info=result.error)
        return Ok(data={"not_logged_in": False, "error": "Failed to load link data"})

    if result.status_code == 404:
        return Redirect(location="/links", status_code=302)

    if not result.succeeded:
        return Ok(data={"not_logged_in": False, "error": "Failed to load link data"})

    return Ok(data={"not_logged_in": False, "link": result.envelope.data})
