"""Password breach lookup against the Pwned Passwords range API.

Only the first five hex characters of the SHA-1 digest leave the process
(k-anonymity); the suffix match happens locally.
"""

from __future__ import annotations

import hashlib

from linkeun_dash.api.client import ApiClient, create_api_client
from linkeun_dash.config import DashConfig
from linkeun_dash.queries.cache import QueryCache

BREACH_QUERY = "breach-check"
PREFIX_LENGTH = 5


def password_digest(password: str) -> str:
    return hashlib.sha1(password.encode("utf-8"), usedforsecurity=False).hexdigest().upper()


def split_digest(digest: str) -> tuple[str, str]:
    return digest[:PREFIX_LENGTH], digest[PREFIX_LENGTH:]


def count_in_range(body: str, suffix: str) -> int:
    for line in body.splitlines():
        hash_suffix, _, count = line.strip().partition(":")
        if hash_suffix.upper() == suffix:
            try:
                return int(count)
            except ValueError:
                return 0
    return 0


async def fetch_breach_count(
    password: str, client: ApiClient, *, range_url: str = "https://api.pwnedpasswords.com/range"
) -> int:
    if not password:
        return 0

    prefix, suffix = split_digest(password_digest(password))
    response = await client.get(f"{range_url.rstrip('/')}/{prefix}")
    return count_in_range(response.text, suffix)


async def query_breach_count(cache: QueryCache, config: DashConfig, password: str) -> int:
    if not password:
        return 0

    async def _load() -> int:
        async with create_api_client(config.api, public=True) as client:
            return await fetch_breach_count(
                password, client, range_url=config.api.breach_range_url
            )

    # Keyed by digest so the plaintext is never held by the cache.
    return await cache.fetch((BREACH_QUERY, password_digest(password)), _load)
