from __future__ import annotations

from pathlib import Path

import httpx
import pytest
from respx import MockRouter

from backend_fakes import BACKEND, USER, envelope


@pytest.fixture
def dash_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("LINKEUN_HOME", str(tmp_path))
    monkeypatch.setenv("API_BASE_URL", BACKEND)
    monkeypatch.delenv("PUBLIC_API_BASE_URL", raising=False)
    monkeypatch.delenv("LINKEUN_ENV", raising=False)
    return tmp_path


@pytest.fixture
def signed_in(respx_mock: MockRouter):
    """Backend accepts the `good-token` session cookie."""

    return respx_mock.get(f"{BACKEND}/api/users/profile").mock(
        return_value=httpx.Response(200, json=envelope(USER))
    )
