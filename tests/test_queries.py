from __future__ import annotations

from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient
from respx import MockRouter
from tenacity import wait_none

from linkeun_dash.app import create_app
from linkeun_dash.config import DashConfig
from linkeun_dash.queries.breach_check import (
    count_in_range,
    password_digest,
    query_breach_count,
    split_digest,
)
from linkeun_dash.queries.cache import QueryCache, should_retry
from linkeun_dash.queries.links import (
    LinkSearchParams,
    build_link_query,
    invalidate_links,
    links_query_key,
)

RANGE = "https://api.pwnedpasswords.com/range"
PASSWORD_RANGE_BODY = (
    "1E2AAA439972480CEC7F16C795BBB429372:1\r\n"
    "1E4C9B93F3F0682250B6CF8331B7EE68FD8:3730471\r\n"
    "1E4C9B93F3F0682250B6CF8331B7EE68FD9:2\r\n"
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def _status_error(status: int) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "http://backend.test/api/s/")
    return httpx.HTTPStatusError(
        "boom", request=request, response=httpx.Response(status, request=request)
    )


def test_link_query_defaults() -> None:
    assert build_link_query(LinkSearchParams()) == {
        "page": "1",
        "per_page": "10",
        "sortBy": "updated_at",
        "sort": "desc",
    }


def test_link_query_passes_search_verbatim() -> None:
    query = build_link_query(
        LinkSearchParams(search="a b&c", page=3, sort="asc"), default_per_page=25
    )
    assert query["search"] == "a b&c"
    assert query["page"] == "3"
    assert query["per_page"] == "25"
    assert query["sort"] == "asc"


def test_links_key_hides_token() -> None:
    key = links_query_key("secret-token", LinkSearchParams())
    assert "secret-token" not in repr(key)


@pytest.mark.asyncio
async def test_cache_serves_fresh_entry_and_refetches_when_stale() -> None:
    clock = FakeClock()
    cache = QueryCache(stale_seconds=300, clock=clock)
    calls = 0

    async def loader() -> int:
        nonlocal calls
        calls += 1
        return calls

    assert await cache.fetch(("k",), loader) == 1
    clock.now += 299
    assert await cache.fetch(("k",), loader) == 1
    clock.now += 1
    assert await cache.fetch(("k",), loader) == 2


@pytest.mark.asyncio
async def test_invalidate_drops_matching_prefix_only() -> None:
    cache = QueryCache()

    async def loader() -> str:
        return "v"

    await cache.fetch(links_query_key("t1", LinkSearchParams()), loader)
    await cache.fetch(links_query_key("t1", LinkSearchParams(page=2)), loader)
    await cache.fetch(links_query_key("t2", LinkSearchParams()), loader)

    invalidate_links(cache, "t1")

    assert len(cache) == 1
    assert cache.is_fresh(links_query_key("t2", LinkSearchParams()))


@pytest.mark.asyncio
async def test_cache_size_is_bounded() -> None:
    cache = QueryCache(max_entries=3)

    async def loader() -> str:
        return "v"

    for i in range(10):
        await cache.fetch(("breach-check", f"digest-{i}"), loader)

    assert len(cache) == 3
    assert cache.is_fresh(("breach-check", "digest-9"))
    assert not cache.is_fresh(("breach-check", "digest-0"))


@pytest.mark.asyncio
async def test_stale_entries_are_dropped() -> None:
    clock = FakeClock()
    cache = QueryCache(stale_seconds=300, clock=clock)

    async def loader() -> str:
        return "v"

    await cache.fetch(("breach-check", "a"), loader)
    await cache.fetch(("breach-check", "b"), loader)
    clock.now += 300
    await cache.fetch(("breach-check", "c"), loader)

    assert len(cache) == 1


def test_retry_policy() -> None:
    assert should_retry(_status_error(500))
    assert should_retry(_status_error(404))
    assert should_retry(httpx.ConnectError("down"))
    assert not should_retry(_status_error(401))
    assert not should_retry(ValueError("bad json"))


@pytest.mark.asyncio
async def test_unauthorized_is_not_retried() -> None:
    cache = QueryCache(wait=wait_none())
    calls = 0

    async def loader() -> int:
        nonlocal calls
        calls += 1
        raise _status_error(401)

    with pytest.raises(httpx.HTTPStatusError):
        await cache.fetch(("k",), loader)
    assert calls == 1


@pytest.mark.asyncio
async def test_transient_failures_retry_three_times() -> None:
    cache = QueryCache(max_retries=3, wait=wait_none())
    calls = 0

    async def loader() -> int:
        nonlocal calls
        calls += 1
        raise httpx.ConnectError("down")

    with pytest.raises(httpx.ConnectError):
        await cache.fetch(("k",), loader)
    assert calls == 4
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_recovers_after_retry() -> None:
    cache = QueryCache(wait=wait_none())
    outcomes = [httpx.ReadTimeout("slow"), 42]

    async def loader() -> int:
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    assert await cache.fetch(("k",), loader) == 42


def test_password_digest_split() -> None:
    prefix, suffix = split_digest(password_digest("password"))
    assert prefix == "5BAA6"
    assert suffix == "1E4C9B93F3F0682250B6CF8331B7EE68FD8"


def test_count_in_range() -> None:
    assert count_in_range(PASSWORD_RANGE_BODY, "1E4C9B93F3F0682250B6CF8331B7EE68FD8") == 3730471
    assert count_in_range(PASSWORD_RANGE_BODY, "FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFF") == 0


@pytest.mark.asyncio
async def test_breach_check_sends_only_prefix(respx_mock: MockRouter) -> None:
    route = respx_mock.get(f"{RANGE}/5BAA6").mock(
        return_value=httpx.Response(200, text=PASSWORD_RANGE_BODY)
    )
    cache = QueryCache()

    count = await query_breach_count(cache, DashConfig(), "password")

    assert count == 3730471
    request = route.calls[0].request
    assert str(request.url) == f"{RANGE}/5BAA6"
    assert "authorization" not in request.headers
    assert b"password" not in request.content

    # Cached under the digest.
    assert await query_breach_count(cache, DashConfig(), "password") == 3730471
    assert route.call_count == 1


@pytest.mark.asyncio
async def test_breach_check_empty_password(respx_mock: MockRouter) -> None:
    assert await query_breach_count(QueryCache(), DashConfig(), "") == 0
    assert len(respx_mock.calls) == 0


def test_breach_check_route(dash_env: Path, respx_mock: MockRouter) -> None:
    respx_mock.get(f"{RANGE}/5BAA6").mock(
        return_value=httpx.Response(200, text=PASSWORD_RANGE_BODY)
    )

    with TestClient(create_app()) as client:
        r = client.post("/tools/breach-check", data={"password": "password"})

    assert r.status_code == 200
    assert r.json() == {"count": 3730471, "breached": True}
