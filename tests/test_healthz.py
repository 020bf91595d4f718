from __future__ import annotations

from pathlib import Path

from fastapi.testclient import TestClient

from linkeun_dash.app import create_app


def test_healthz_ok(dash_env: Path) -> None:
    with TestClient(create_app()) as client:
        response = client.get("/healthz")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


def test_home_renders_for_anonymous_visitor(dash_env: Path) -> None:
    with TestClient(create_app()) as client:
        response = client.get("/")
        assert response.status_code == 200
        assert "Linkeun Mono" in response.text
        assert "/auth/login" in response.text


def test_startup_creates_layout(dash_env: Path) -> None:
    with TestClient(create_app()) as client:
        client.get("/healthz")
        assert client.app.state.linkeun_paths.logs_dir.is_dir()
