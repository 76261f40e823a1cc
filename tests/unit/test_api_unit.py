"""Unit-level API tests for direct endpoint behavior and error handling."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from mallnav.api import STATE, create_app


def test_health_endpoint_without_venue() -> None:
    """Health endpoint should report API availability."""
    client = TestClient(create_app())
    res = client.get("/health")

    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "ok"
    assert body["venue_loaded"] is False
    assert body["node_count"] == 0


def test_endpoints_without_venue_return_400() -> None:
    """Browsing and routing should reject requests before a venue is loaded."""
    STATE.graph = None
    client = TestClient(create_app())

    assert client.get("/floors").status_code == 400
    assert client.get("/search", params={"q": "shop"}).status_code == 400
    assert client.post("/scan", json={"payload": "A"}).status_code == 400

    res = client.post("/find-path", json={"start_id": "A", "end_id": "B"})
    assert res.status_code == 400
    assert "No venue loaded" in res.json()["detail"]


def test_post_venue_rejects_malformed_records() -> None:
    client = TestClient(create_app())
    res = client.post("/venue", json={"nodes": [{"node_id": "A"}], "edges": []})

    assert res.status_code == 400
    assert res.json()["detail"].startswith("Venue loading failed")
    assert STATE.graph is None


def test_find_path_no_route_returns_404() -> None:
    """Disconnected same-floor nodes yield 404."""
    client = TestClient(create_app())
    nodes = [
        {"node_id": "A", "floor": 1, "x": 0, "y": 0, "type": "shop"},
        {"node_id": "B", "floor": 1, "x": 5, "y": 0, "type": "shop"},
    ]
    assert client.post("/venue", json={"nodes": nodes, "edges": []}).status_code == 200

    res = client.post("/find-path", json={"start_id": "A", "end_id": "B"})
    assert res.status_code == 404
    assert res.json()["detail"] == "No walkable path found"

    res = client.post("/find-path", json={"start_id": "A", "end_id": "Z"})
    assert res.status_code == 404
    assert "end node 'Z'" in res.json()["detail"]


def test_find_path_requires_start_without_scan() -> None:
    client = TestClient(create_app())
    client.post("/venue/generate", json={"floor_count": 1})

    res = client.post("/find-path", json={"end_id": "cf_1"})
    assert res.status_code == 400
    assert "start_id is required" in res.json()["detail"]


def test_generated_venue_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MALLNAV_GENERATED_FLOORS", "2")
    client = TestClient(create_app())

    body = client.get("/health").json()
    assert body["venue_loaded"] is True
    assert body["node_count"] == 48
