"""Typed gateway to the Linkeun backend API.

Two layers:
- ``ApiClient.get/post/put/patch/delete`` behave like a plain HTTP client and raise
  ``httpx.HTTPStatusError`` (response attached) on non-2xx.
- ``ApiClient.call`` never raises; it returns ``BackendReply`` or ``TransportFailure``
  so callers can branch on the outcome instead of inspecting exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import ValidationError

from linkeun_dash.api.models import ApiResponse
from linkeun_dash.config import ApiConfig

AUTHORIZATION_HEADER = "Authorization"


@dataclass(frozen=True)
class BackendReply:
    """The backend answered with an HTTP response (any status)."""

    status_code: int
    envelope: ApiResponse[Any]

    @property
    def succeeded(self) -> bool:
        # The backend may answer 200 with an embedded error.
        return 200 <= self.status_code < 300 and self.envelope.error is None

    def failure_message(self, default: str) -> str:
        if self.envelope.message:
            return self.envelope.message
        if isinstance(self.envelope.error, str) and self.envelope.error:
            return self.envelope.error
        return default


@dataclass(frozen=True)
class TransportFailure:
    """No usable response: connection error, timeout or unparseable body."""

    error: Exception


type GatewayResult = BackendReply | TransportFailure


class ApiClient:
    def __init__(
        self,
        base_url: str,
        session_token: str | None = None,
        *,
        timeout: float = 10.0,
    ) -> None:
        headers = {"Content-Type": "application/json"}
        if session_token:
            headers[AUTHORIZATION_HEADER] = f"Bearer {session_token}"

        self._base_url = base_url
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=httpx.Timeout(timeout),
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def set_auth_token(self, token: str) -> None:
        self._client.headers[AUTHORIZATION_HEADER] = f"Bearer {token}"

    def remove_auth_token(self) -> None:
        self._client.headers.pop(AUTHORIZATION_HEADER, None)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        response = await self._client.request(method, url, **kwargs)
        response.raise_for_status()
        return response

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, json: Any | None = None, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", url, json=json, **kwargs)

    async def put(self, url: str, json: Any | None = None, **kwargs: Any) -> httpx.Response:
        return await self.request("PUT", url, json=json, **kwargs)

    async def patch(self, url: str, json: Any | None = None, **kwargs: Any) -> httpx.Response:
        return await self.request("PATCH", url, json=json, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("DELETE", url, **kwargs)

    async def call(
        self,
        method: str,
        url: str,
        *,
        json: Any | None = None,
        params: dict[str, Any] | None = None,
    ) -> GatewayResult:
        try:
            response = await self.request(method, url, json=json, params=params)
        except httpx.HTTPStatusError as exc:
            response = exc.response
        except httpx.HTTPError as exc:
            return TransportFailure(exc)

        try:
            envelope = ApiResponse[Any].model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            if response.is_success:
                return TransportFailure(exc)
            # Error pages (e.g. a proxy's HTML 502) still carry a usable status.
            envelope = ApiResponse[Any]()

        return BackendReply(status_code=response.status_code, envelope=envelope)


def create_api_client(
    config: ApiConfig,
    session_token: str | None = None,
    *,
    public: bool = False,
) -> ApiClient:
    base_url = config.effective_public_base_url if public else config.base_url
    return ApiClient(base_url, session_token, timeout=config.timeout_seconds)
