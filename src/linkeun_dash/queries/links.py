from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Literal

from linkeun_dash.api.client import ApiClient, create_api_client
from linkeun_dash.api.models import ApiResponse, Link
from linkeun_dash.config import DashConfig
from linkeun_dash.queries.cache import QueryCache, QueryKey

LINKS_PATH = "/api/s/"
LINKS_QUERY = "links"


@dataclass(frozen=True)
class LinkSearchParams:
    search: str | None = None
    page: int | None = None
    per_page: int | None = None
    sort_by: str | None = None
    sort: Literal["asc", "desc"] | None = None


def build_link_query(params: LinkSearchParams, *, default_per_page: int = 10) -> dict[str, str]:
    query: dict[str, str] = {}
    if params.search:
        query["search"] = params.search
    query["page"] = str(params.page or 1)
    query["per_page"] = str(params.per_page or default_per_page)
    query["sortBy"] = params.sort_by or "updated_at"
    query["sort"] = params.sort or "desc"
    return query


def token_digest(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def links_query_key(token: str, params: LinkSearchParams) -> QueryKey:
    return (LINKS_QUERY, token_digest(token), params)


async def fetch_links(
    client: ApiClient, params: LinkSearchParams, *, default_per_page: int = 10
) -> ApiResponse[list[Link]]:
    response = await client.get(
        LINKS_PATH, params=build_link_query(params, default_per_page=default_per_page)
    )
    return ApiResponse[list[Link]].model_validate(response.json())


async def query_links(
    cache: QueryCache,
    config: DashConfig,
    token: str | None,
    params: LinkSearchParams,
) -> ApiResponse[list[Link]] | None:
    """Cached links listing for the session; None when there is no session."""

    if not token:
        return None

    async def _load() -> ApiResponse[list[Link]]:
        async with create_api_client(config.api, token) as client:
            return await fetch_links(
                client, params, default_per_page=config.links.default_per_page
            )

    return await cache.fetch(links_query_key(token, params), _load)


def invalidate_links(cache: QueryCache, token: str | None) -> None:
    if token:
        cache.invalidate(LINKS_QUERY, token_digest(token))
