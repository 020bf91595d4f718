from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient
from respx import MockRouter

from backend_fakes import BACKEND, LINK, USER, envelope
from linkeun_dash.actions.forms import CreateLinkForm, UpdateLinkForm
from linkeun_dash.actions.links import (
    build_create_payload,
    build_update_payload,
    create_link,
    update_link,
)
from linkeun_dash.api.models import User
from linkeun_dash.app import create_app
from linkeun_dash.config import DashConfig
from linkeun_dash.context import ANONYMOUS, RequestContext
from linkeun_dash.results import Fail, Ok


def _config() -> DashConfig:
    return DashConfig.model_validate({"api": {"base_url": BACKEND}})


def _signed_in_ctx() -> RequestContext:
    return RequestContext(user=User.model_validate(USER), token="good-token")


def test_create_payload_omits_blank_optionals() -> None:
    form = CreateLinkForm.model_validate(
        {
            "original_url": "https://example.com",
            "custom_alias": "  ",
            "password": "",
            "description": "Docs",
        }
    )
    assert build_create_payload(form) == {
        "original_url": "https://example.com",
        "description": "Docs",
    }


def test_update_payload_distinguishes_clear_from_untouched() -> None:
    cleared = build_update_payload(UpdateLinkForm.model_validate({"description": ""}))
    untouched = build_update_payload(UpdateLinkForm.model_validate({}))

    assert cleared == {"description": None}
    assert untouched == {}
    assert cleared != untouched


def test_update_payload_keeps_values_and_clears_password() -> None:
    form = UpdateLinkForm.model_validate(
        {
            "original_url": "https://example.org/new",
            "custom_alias": "docs",
            "password": "   ",
            "description": "New text",
        }
    )
    assert build_update_payload(form) == {
        "original_url": "https://example.org/new",
        "custom_alias": "docs",
        "password": None,
        "description": "New text",
    }


@pytest.mark.asyncio
async def test_create_link_rejects_non_url_without_network(respx_mock: MockRouter) -> None:
    result = await create_link({"original_url": "not a url"}, _signed_in_ctx(), _config())

    assert isinstance(result, Fail)
    assert result.status_code == 400
    assert result.body["error"] == "Please enter a valid URL"
    assert len(respx_mock.calls) == 0


@pytest.mark.asyncio
async def test_create_link_requires_session(respx_mock: MockRouter) -> None:
    result = await create_link(
        {"original_url": "https://example.com", "password": "pw"}, ANONYMOUS, _config()
    )

    assert isinstance(result, Fail)
    assert result.status_code == 401
    assert "password" not in result.body["values"]
    assert len(respx_mock.calls) == 0


@pytest.mark.asyncio
async def test_create_link_success(respx_mock: MockRouter) -> None:
    route = respx_mock.post(f"{BACKEND}/api/s/").mock(
        return_value=httpx.Response(201, json=envelope(LINK, code=201))
    )

    result = await create_link(
        {"original_url": "https://example.com/docs", "description": "Docs"},
        _signed_in_ctx(),
        _config(),
    )

    assert isinstance(result, Ok)
    assert result.data["success"] is True
    assert result.data["link"]["short_code"] == "abc123"
    assert route.calls[0].request.headers["authorization"] == "Bearer good-token"


@pytest.mark.asyncio
async def test_create_link_network_error(respx_mock: MockRouter) -> None:
    respx_mock.post(f"{BACKEND}/api/s/").mock(side_effect=httpx.ConnectError("down"))

    result = await create_link({"original_url": "https://example.com"}, _signed_in_ctx(), _config())

    assert isinstance(result, Fail)
    assert result.status_code == 500
    assert result.body["error"] == "Network error: Failed to create link"


@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["", "   ", "not a url"])
async def test_update_link_rejects_submitted_invalid_url_without_network(
    respx_mock: MockRouter, url: str
) -> None:
    result = await update_link("abc123", {"original_url": url}, _signed_in_ctx(), _config())

    assert isinstance(result, Fail)
    assert result.status_code == 400
    assert result.body["error"] == "Please enter a valid URL"
    assert len(respx_mock.calls) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["ftp://files.example.com/x", "javascript:alert(1)"])
async def test_link_urls_must_be_http(respx_mock: MockRouter, url: str) -> None:
    result = await create_link({"original_url": url}, _signed_in_ctx(), _config())

    assert isinstance(result, Fail)
    assert result.body["error"] == "Please enter a valid URL"
    assert len(respx_mock.calls) == 0


@pytest.mark.asyncio
async def test_update_link_sends_patch_with_null_for_cleared_field(
    respx_mock: MockRouter,
) -> None:
    route = respx_mock.patch(f"{BACKEND}/api/s/abc123").mock(
        return_value=httpx.Response(200, json=envelope({**LINK, "description": None}))
    )

    result = await update_link("abc123", {"description": ""}, _signed_in_ctx(), _config())

    assert isinstance(result, Ok)
    assert json.loads(route.calls[0].request.content) == {"description": None}


@pytest.mark.asyncio
async def test_update_link_backend_error_status_passes_through(respx_mock: MockRouter) -> None:
    respx_mock.patch(f"{BACKEND}/api/s/abc123").mock(
        return_value=httpx.Response(
            409, json=envelope(code=409, error="conflict", message="Alias already in use")
        )
    )

    result = await update_link("abc123", {"custom_alias": "taken"}, _signed_in_ctx(), _config())

    assert isinstance(result, Fail)
    assert result.status_code == 409
    assert result.body == {"error": "Alias already in use", "values": {"custom_alias": "taken"}}


def test_links_page_lists_links_and_caches(dash_env: Path, signed_in, respx_mock) -> None:
    listing = respx_mock.get(f"{BACKEND}/api/s/").mock(
        return_value=httpx.Response(
            200,
            json=envelope(
                [LINK],
                meta={
                    "page": 1,
                    "per_page": 10,
                    "total": 1,
                    "has_next": False,
                    "has_prev": False,
                    "last_page": 1,
                },
            ),
        )
    )

    with TestClient(create_app()) as client:
        client.cookies.set("auth-session", "good-token")
        r = client.get("/links")
        assert r.status_code == 200
        assert "https://example.com/docs" in r.text

        data = client.get("/links/data")
        assert data.status_code == 200
        assert data.json()["data"][0]["short_code"] == "abc123"

    # Same parameters within the staleness window: one backend call.
    assert listing.call_count == 1
    params = listing.calls[0].request.url.params
    assert params["sortBy"] == "updated_at"
    assert params["sort"] == "desc"
    assert params["page"] == "1"
    assert params["per_page"] == "10"


def test_links_page_for_anonymous_visitor(dash_env: Path, respx_mock: MockRouter) -> None:
    with TestClient(create_app()) as client:
        r = client.get("/links")

    assert r.status_code == 200
    assert "log in" in r.text
    assert len(respx_mock.calls) == 0


def test_create_link_invalidates_listing(dash_env: Path, signed_in, respx_mock) -> None:
    listing = respx_mock.get(f"{BACKEND}/api/s/").mock(
        return_value=httpx.Response(200, json=envelope([LINK]))
    )
    respx_mock.post(f"{BACKEND}/api/s/").mock(
        return_value=httpx.Response(201, json=envelope(LINK, code=201))
    )

    with TestClient(create_app()) as client:
        client.cookies.set("auth-session", "good-token")
        client.get("/links")
        r = client.post("/links/create", data={"original_url": "https://example.com/docs"})
        assert r.status_code == 200
        assert "Link created" in r.text
        client.get("/links")

    assert listing.call_count == 2


def test_update_page_redirects_on_missing_link(dash_env: Path, signed_in, respx_mock) -> None:
    respx_mock.get(f"{BACKEND}/api/s/gone/detail").mock(
        return_value=httpx.Response(404, json=envelope(code=404, error="nf", message="Not found"))
    )

    with TestClient(create_app()) as client:
        client.cookies.set("auth-session", "good-token")
        r = client.get("/links/gone/update", follow_redirects=False)

    assert r.status_code == 302
    assert r.headers["location"] == "/links"


def test_update_page_prefills_link(dash_env: Path, signed_in, respx_mock) -> None:
    respx_mock.get(f"{BACKEND}/api/s/abc123/detail").mock(
        return_value=httpx.Response(200, json=envelope(LINK))
    )

    with TestClient(create_app()) as client:
        client.cookies.set("auth-session", "good-token")
        r = client.get("/links/abc123/update")

    assert r.status_code == 200
    assert 'value="https://example.com/docs"' in r.text
    assert "Details" in r.text
