"""Integration tests for venue loading, search and same-floor routing endpoints."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from mallnav.api import create_app


def _sample_venue() -> dict:
    """Small one-floor venue with one non-accessible shortcut."""
    return {
        "nodes": [
            {"node_id": "entrance", "floor": 1, "x": 0, "y": 0, "type": "entrance", "label": "Main Entrance"},
            {"node_id": "j1", "floor": 1, "x": 10, "y": 0, "type": "junction", "label": "Junction 1"},
            {"node_id": "cf", "floor": 1, "x": 10, "y": 5, "type": "café", "label": "Café"},
            {"node_id": "rst", "floor": 1, "x": 20, "y": 0, "type": "restaurant", "label": "Restaurant"},
        ],
        "edges": [
            {"from": "entrance", "to": "j1", "distance": 10},
            {"from": "j1", "to": "cf", "distance": 5},
            {"from": "j1", "to": "rst", "distance": 10},
            {"from": "entrance", "to": "rst", "distance": 12, "accessible": False},
        ],
    }


def test_load_venue_and_route() -> None:
    """POST /venue then /find-path returns path, steps and time estimate."""
    client = TestClient(create_app())

    load_res = client.post("/venue", json=_sample_venue())
    assert load_res.status_code == 200
    assert load_res.json()["node_count"] == 4
    assert load_res.json()["edge_count"] == 4

    res = client.post("/find-path", json={"start_id": "entrance", "end_id": "cf"})
    assert res.status_code == 200
    body = res.json()

    assert body["path"] == ["entrance", "j1", "cf"]
    assert body["distance"] == pytest.approx(15.0)
    assert body["floor_change"] is False
    assert [step["label"] for step in body["steps"]] == ["Main Entrance", "Junction 1", "Café"]
    assert body["estimated_seconds"] == pytest.approx(15.0 / 1.4)


def test_accessibility_toggle_rebuilds_graph() -> None:
    client = TestClient(create_app())
    client.post("/venue", json=_sample_venue())

    full = client.post("/find-path", json={"start_id": "entrance", "end_id": "rst"}).json()
    assert full["distance"] == pytest.approx(12.0)

    toggle = client.post("/accessibility", json={"accessible_only": True})
    assert toggle.status_code == 200
    assert toggle.json()["edge_count"] == 3

    accessible = client.post("/find-path", json={"start_id": "entrance", "end_id": "rst"}).json()
    assert accessible["path"] == ["entrance", "j1", "rst"]
    assert accessible["distance"] == pytest.approx(20.0)


def test_search_and_node_lookup() -> None:
    client = TestClient(create_app())
    client.post("/venue", json=_sample_venue())

    res = client.get("/search", params={"q": "CAF"})
    assert res.status_code == 200
    assert [n["node_id"] for n in res.json()["nodes"]] == ["cf"]

    assert client.get("/nodes/rst").json()["label"] == "Restaurant"
    assert client.get("/nodes/missing").status_code == 404

    by_type = client.get("/nodes", params={"category": "junction"}).json()
    assert [n["node_id"] for n in by_type["nodes"]] == ["j1"]

    grouped = client.get("/nodes", params={"grouped": "true"}).json()["groups"]
    assert list(grouped) == ["entrance", "junction", "café", "restaurant"]


def test_scan_sets_current_location() -> None:
    client = TestClient(create_app())
    client.post("/venue", json=_sample_venue())

    scan_res = client.post("/scan", json={"payload": '{"node_id": "j1"}'})
    assert scan_res.status_code == 200
    assert scan_res.json()["message"] == "You are now at: Junction 1"
    assert client.get("/health").json()["current_location"] == "j1"

    route = client.post("/find-path", json={"end_id": "cf"}).json()
    assert route["path"] == ["j1", "cf"]

    assert client.post("/scan", json={"payload": "unknown"}).status_code == 404
    assert client.post("/scan", json={"payload": "NODE:"}).status_code == 400


def test_reachable_endpoint() -> None:
    client = TestClient(create_app())
    client.post("/venue", json=_sample_venue())

    res = client.get("/reachable", params={"start_id": "entrance", "max_distance": 12})
    assert res.status_code == 200
    assert [n["node_id"] for n in res.json()["nodes"]] == ["entrance", "j1", "rst"]

    assert client.get("/reachable", params={"start_id": "nope", "max_distance": 5}).status_code == 404
