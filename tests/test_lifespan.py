"""Tests for application startup and shutdown."""

from __future__ import annotations

from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app


def test_injected_store_is_kept_and_not_closed(store):
    app = create_app(settings=Settings(), store=store)

    with TestClient(app) as client:
        assert client.get("/").text == "ok!"

    assert app.state.store is store


def test_sweep_runs_with_the_app(store):
    app = create_app(settings=Settings(compaction_interval_minutes=5), store=store)

    with TestClient(app) as client:
        response = client.post("/fluxo", json={"litros": 1, "mililitros": 0, "deviceId": "dev1"})
        assert response.status_code == 200
