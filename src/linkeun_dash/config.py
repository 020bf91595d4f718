from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

from linkeun_dash.home import LinkeunPaths

DEFAULT_API_BASE_URL = "http://localhost:3000"


class ApiConfig(BaseModel):
    base_url: str = Field(
        default=DEFAULT_API_BASE_URL,
        description="Backend origin used by server-side calls (env: API_BASE_URL)",
    )
    public_base_url: str | None = Field(
        default=None,
        description=(
            "Backend origin exposed to browsers (env: PUBLIC_API_BASE_URL). "
            "Falls back to base_url when unset."
        ),
    )
    timeout_seconds: float = Field(default=10.0, gt=0)
    breach_range_url: str = Field(default="https://api.pwnedpasswords.com/range")

    @property
    def effective_public_base_url(self) -> str:
        return self.public_base_url or self.base_url


class SessionConfig(BaseModel):
    cookie_name: str = Field(default="auth-session")
    fallback_ttl_seconds: int = Field(
        default=24 * 60 * 60,
        ge=1,
        description="Session lifetime assumed when the backend does not report expires_in.",
    )


class LinksConfig(BaseModel):
    default_per_page: int = Field(default=10, ge=1, le=1000)


class QueriesConfig(BaseModel):
    stale_seconds: float = Field(default=5 * 60, ge=0)
    max_entries: int = Field(default=1000, ge=1)
    max_retries: int = Field(default=3, ge=0)


class NetworkConfig(BaseModel):
    bind_host: str = Field(default="127.0.0.1")
    port: int = Field(default=5173, ge=1, le=65535)


class LoggingConfig(BaseModel):
    max_size_mb: int = Field(
        default=10, ge=1, description="Max size of a log file in MB before rolling."
    )
    backup_count: int = Field(default=5, ge=1, description="Number of log archives to keep.")


class DashConfig(BaseModel):
    version: str = Field(default="1")
    environment: Literal["development", "production"] = Field(default="development")
    api: ApiConfig = Field(default_factory=ApiConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    links: LinksConfig = Field(default_factory=LinksConfig)
    queries: QueriesConfig = Field(default_factory=QueriesConfig)
    network: NetworkConfig = Field(default_factory=NetworkConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def _read_json(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def _apply_env_overrides(raw: dict[str, Any], env: dict[str, str]) -> dict[str, Any]:
    api = dict(raw.get("api") or {})

    base_url = (env.get("API_BASE_URL") or "").strip()
    if base_url:
        api["base_url"] = base_url

    public_base_url = (env.get("PUBLIC_API_BASE_URL") or "").strip()
    if public_base_url:
        api["public_base_url"] = public_base_url

    merged = {**raw, "api": api}

    environment = (env.get("LINKEUN_ENV") or "").strip().lower()
    if environment:
        merged["environment"] = environment

    return merged


def load_dash_config(
    paths: LinkeunPaths, environ: dict[str, str] | None = None
) -> DashConfig:
    """Load config from ${LINKEUN_HOME}/config/dash.json, then apply env overrides.

    - If the file is missing: defaults (plus env).
    - Validation is performed by Pydantic.
    """

    env = os.environ if environ is None else environ

    config_path = paths.dash_config_path
    raw = _read_json(config_path) if config_path.exists() else {}
    return DashConfig.model_validate(_apply_env_overrides(raw, env))

