"""FastAPI routes for venue loading, floor browsing, search and routing.

Flow:
- Load a venue (`/venue` with node/edge records, or `/venue/generate`).
- Browse floors and nodes (`/floors`, `/nodes`, `/search`).
- Set the current location from a QR scan (`/scan`).
- Route to a destination (`/find-path`), with floor-change guidance when the
  destination is on another floor.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from mallnav.connectivity import reachable_floors
from mallnav.graph import Graph
from mallnav.scan import resolve_scan
from mallnav.utils import (
    WALKING_SPEED_M_PER_S,
    estimate_walk_seconds,
    group_nodes_by_category,
    route_steps,
    serialize_node,
    serialize_path_result,
)
from mallnav.venue_data import (
    DEFAULT_STAIR_WEIGHT,
    VenueData,
    generate_multi_floor_venue,
    load_venue,
    load_venue_json,
)

logger = logging.getLogger(__name__)


@dataclass
class NavigationState:
    """In-memory state for the currently loaded venue."""

    venue: VenueData | None = None
    graph: Graph | None = None
    accessible_only: bool = False
    current_location: str | None = None


STATE = NavigationState()


class VenueRequest(BaseModel):
    """Venue node/edge records in the venue JSON shape."""

    nodes: list[dict[str, Any]]
    edges: list[dict[str, Any]]
    accessible_only: bool = False


class GenerateVenueRequest(BaseModel):
    """Parameters for the synthetic multi-floor venue."""

    floor_count: int = Field(default=10, ge=1, le=200)
    stair_weight: float = Field(default=DEFAULT_STAIR_WEIGHT, ge=0)
    accessible_only: bool = False


class AccessibilityRequest(BaseModel):
    accessible_only: bool


class PathRequest(BaseModel):
    """Route request; `start_id` defaults to the last scanned location."""

    start_id: str | None = None
    end_id: str


class RouteStep(BaseModel):
    node_id: str
    label: str
    floor: int | None = None
    category: str | None = None


class PathResponse(BaseModel):
    """Response payload for routing requests."""

    path: list[str]
    distance: float
    floor_change: bool
    target_floor: int | None = None
    message: str | None = None
    steps: list[RouteStep]
    estimated_seconds: float


class ScanRequest(BaseModel):
    payload: str = Field(..., min_length=1)


def _install_venue(venue: VenueData, accessible_only: bool) -> Graph:
    """Build a fresh graph for `venue` and swap it into STATE."""
    graph = venue.build_graph(accessible_only=accessible_only)
    STATE.venue = venue
    STATE.graph = graph
    STATE.accessible_only = accessible_only
    if STATE.current_location not in graph:
        STATE.current_location = None
    logger.info(
        "Installed venue: %d nodes, %d edges (accessible_only=%s)",
        graph.node_count,
        graph.edge_count,
        accessible_only,
    )
    return graph


def _graph_or_400() -> Graph:
    """Get the loaded graph or raise 400."""
    if STATE.graph is None:
        raise HTTPException(status_code=400, detail="No venue loaded yet")
    return STATE.graph


def _venue_summary(graph: Graph) -> dict[str, Any]:
    return {
        "node_count": graph.node_count,
        "edge_count": graph.edge_count,
        "floors": graph.get_floors(),
        "accessible_only": graph.accessible_only,
    }


def _load_startup_venue() -> None:
    """Load a venue from MALLNAV_VENUE_PATH or MALLNAV_GENERATED_FLOORS, if set."""
    if STATE.graph is not None:
        return

    venue_path = os.getenv("MALLNAV_VENUE_PATH", "").strip()
    generated_floors = int(os.getenv("MALLNAV_GENERATED_FLOORS", "0") or 0)

    if venue_path:
        _install_venue(load_venue_json(venue_path), accessible_only=False)
    elif generated_floors > 0:
        _install_venue(generate_multi_floor_venue(floor_count=generated_floors), accessible_only=False)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    _load_startup_venue()

    app = FastAPI(title="mallnav API", version="1.0.0")

    raw_origins = os.getenv("MALLNAV_CORS_ORIGINS", "*").strip()
    if raw_origins == "*":
        cors_origins = ["*"]
        allow_credentials = False
    else:
        cors_origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]
        allow_credentials = True

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    walking_speed = float(os.getenv("MALLNAV_WALKING_SPEED", str(WALKING_SPEED_M_PER_S)))
    if walking_speed <= 0:
        raise ValueError("MALLNAV_WALKING_SPEED must be > 0")

    @app.get("/health")
    def health() -> dict[str, Any]:
        """Health endpoint with loaded-venue metadata."""
        graph = STATE.graph
        return {
            "status": "ok",
            "version": app.version,
            "venue_loaded": graph is not None,
            "node_count": graph.node_count if graph is not None else 0,
            "edge_count": graph.edge_count if graph is not None else 0,
            "accessible_only": STATE.accessible_only,
            "current_location": STATE.current_location,
        }

    @app.post("/venue")
    async def post_venue(payload: VenueRequest) -> dict[str, Any]:
        """Replace the loaded venue with caller-supplied node/edge records."""
        try:
            venue = load_venue(payload.nodes, payload.edges)
            graph = _install_venue(venue, payload.accessible_only)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=f"Venue loading failed: {exc}") from exc
        except Exception as exc:  # pragma: no cover - safety net
            raise HTTPException(status_code=500, detail=f"Unexpected venue loading error: {exc}") from exc

        return {"message": "Venue loaded successfully", **_venue_summary(graph)}

    @app.post("/venue/generate")
    async def post_generated_venue(payload: GenerateVenueRequest) -> dict[str, Any]:
        """Load the synthetic multi-floor mall."""
        try:
            venue = generate_multi_floor_venue(
                floor_count=payload.floor_count,
                stair_weight=payload.stair_weight,
            )
            graph = _install_venue(venue, payload.accessible_only)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=f"Venue generation failed: {exc}") from exc

        return {"message": "Venue generated successfully", **_venue_summary(graph)}

    @app.post("/accessibility")
    async def post_accessibility(payload: AccessibilityRequest) -> dict[str, Any]:
        """Rebuild the graph with or without non-accessible edges."""
        _graph_or_400()
        graph = _install_venue(STATE.venue, payload.accessible_only)
        return _venue_summary(graph)

    @app.get("/floors")
    async def get_floors() -> dict[str, Any]:
        graph = _graph_or_400()
        floors = graph.get_floors()
        return {
            "floors": [
                {
                    "floor": floor,
                    "node_count": len(graph.get_nodes_by_floor(floor)),
                    "connected_floors": graph.get_connected_floors(floor),
                }
                for floor in floors
            ]
        }

    @app.get("/floors/{floor}/nodes")
    async def get_floor_nodes(floor: int) -> dict[str, Any]:
        graph = _graph_or_400()
        nodes = graph.get_nodes_by_floor(floor)
        if not nodes:
            raise HTTPException(status_code=404, detail=f"Floor {floor} was not found")
        return {"floor": floor, "nodes": [serialize_node(n) for n in nodes]}

    @app.get("/floors/{floor}/connected")
    async def get_floor_connections(floor: int) -> dict[str, Any]:
        """Floors one stair hop away, plus every floor each connector serves."""
        graph = _graph_or_400()
        if floor not in graph.get_floors():
            raise HTTPException(status_code=404, detail=f"Floor {floor} was not found")

        connectors = [n for n in graph.get_nodes_by_floor(floor) if n.is_connector]
        return {
            "floor": floor,
            "connected_floors": graph.get_connected_floors(floor),
            "connectors": [
                {"node_id": c.node_id, "label": c.label, "floors": reachable_floors(graph, c.node_id)}
                for c in connectors
            ],
        }

    @app.get("/nodes")
    async def get_nodes(
        category: str | None = Query(default=None),
        floor: int | None = Query(default=None),
        grouped: bool = Query(default=False),
    ) -> dict[str, Any]:
        """List nodes, optionally filtered by category and/or floor."""
        graph = _graph_or_400()

        nodes = graph.get_nodes_by_type(category) if category else graph.get_all_nodes()
        if floor is not None:
            nodes = [n for n in nodes if n.floor == floor]

        if grouped:
            return {
                "groups": {
                    name: [serialize_node(n) for n in members]
                    for name, members in group_nodes_by_category(nodes).items()
                }
            }
        return {"nodes": [serialize_node(n) for n in nodes]}

    @app.get("/nodes/{node_id}")
    async def get_node(node_id: str) -> dict[str, Any]:
        graph = _graph_or_400()
        node = graph.get_node(node_id)
        if node is None:
            raise HTTPException(status_code=404, detail=f"Node '{node_id}' was not found")
        return serialize_node(node)

    @app.get("/search")
    async def search(q: str = Query(default="")) -> dict[str, Any]:
        """Destination search over label, category and id."""
        graph = _graph_or_400()
        return {"query": q, "nodes": [serialize_node(n) for n in graph.search_nodes(q)]}

    @app.post("/scan")
    async def scan(payload: ScanRequest) -> dict[str, Any]:
        """Resolve a scanned QR payload and make it the current location."""
        graph = _graph_or_400()
        try:
            node = resolve_scan(graph, payload.payload)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=f"Invalid scan: {exc}") from exc

        if node is None:
            raise HTTPException(status_code=404, detail="This QR code is not recognized")

        STATE.current_location = node.node_id
        return {"message": f"You are now at: {node.label}", "node": serialize_node(node)}

    @app.post("/find-path", response_model=PathResponse)
    async def find_path(payload: PathRequest) -> PathResponse:
        """Compute a route between two node ids."""
        graph = _graph_or_400()

        start_id = payload.start_id or STATE.current_location
        if not start_id:
            raise HTTPException(status_code=400, detail="start_id is required when no location was scanned")

        for label, node_id in (("start", start_id), ("end", payload.end_id)):
            if graph.get_node(node_id) is None:
                raise HTTPException(status_code=404, detail=f"{label} node '{node_id}' was not found")

        result = graph.get_shortest_path(start_id, payload.end_id)
        if result is None:
            raise HTTPException(status_code=404, detail="No walkable path found")

        return PathResponse(
            **serialize_path_result(result),
            steps=[RouteStep(**step) for step in route_steps(graph, result)],
            estimated_seconds=estimate_walk_seconds(result.distance, walking_speed),
        )

    @app.get("/reachable")
    async def get_reachable(
        start_id: str = Query(...),
        max_distance: float = Query(..., ge=0),
    ) -> dict[str, Any]:
        """Nodes within a walking-distance budget of `start_id`."""
        graph = _graph_or_400()
        if graph.get_node(start_id) is None:
            raise HTTPException(status_code=404, detail=f"start node '{start_id}' was not found")

        reachable = graph.get_reachable_nodes(start_id, max_distance)
        return {
            "start_id": start_id,
            "max_distance": max_distance,
            "nodes": [
                {"node_id": node_id, "distance": dist}
                for node_id, dist in sorted(reachable.items(), key=lambda item: item[1])
            ],
        }

    return app
