"""Venue datasets: record parsing, JSON loading and multi-floor generation.

A `VenueData` instance is the explicit configuration object handed to graph
construction; nothing here keeps process-wide mutable state.

Record shapes (as shipped in venue JSON files):
    node: {"qr_id", "node_id", "floor", "x", "y", "type", "label"}
    edge: {"from", "to", "distance", "accessible"}
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import numpy as np

from mallnav.graph import Graph
from mallnav.models import Edge, Node, NodeCategory

logger = logging.getLogger(__name__)

# Template coordinates are map units; walking weights are meters.
METERS_PER_MAP_UNIT = 0.1
DEFAULT_STAIR_WEIGHT = 5.0
SHOPS_PER_FLOOR = 10


@dataclass(slots=True)
class VenueData:
    """Full node/edge snapshot of one venue."""

    nodes: list[Node] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)

    def build_graph(self, accessible_only: bool = False) -> Graph:
        return Graph(self.nodes, self.edges, accessible_only=accessible_only)

    @property
    def floors(self) -> list[int]:
        return sorted({n.floor for n in self.nodes})


def node_from_record(record: dict[str, Any], idx: int = 0) -> Node:
    """Build a Node from one venue JSON record."""
    if not isinstance(record, dict):
        raise ValueError(f"node[{idx}] must be an object")

    required = {"node_id", "floor", "x", "y", "type"}
    if not required.issubset(record.keys()):
        raise ValueError(f"node[{idx}] must include node_id, floor, x, y, type")

    try:
        return Node(
            node_id=str(record["node_id"]),
            floor=int(record["floor"]),
            x=float(record["x"]),
            y=float(record["y"]),
            category=str(record["type"]),
            label=str(record.get("label") or record["node_id"]),
            qr_id=str(record.get("qr_id") or ""),
        )
    except (TypeError, ValueError) as exc:
        raise ValueError(f"node[{idx}] is invalid: {exc}") from exc


def edge_from_record(record: dict[str, Any], idx: int = 0) -> Edge:
    """Build an Edge from one venue JSON record (`accessible` defaults to True)."""
    if not isinstance(record, dict):
        raise ValueError(f"edge[{idx}] must be an object")

    required = {"from", "to", "distance"}
    if not required.issubset(record.keys()):
        raise ValueError(f"edge[{idx}] must include from, to, distance")

    accessible = record.get("accessible", True)
    if not isinstance(accessible, bool):
        raise ValueError(f"edge[{idx}].accessible must be true or false")

    try:
        return Edge(
            source=str(record["from"]),
            target=str(record["to"]),
            weight=float(record["distance"]),
            accessible=accessible,
        )
    except (TypeError, ValueError) as exc:
        raise ValueError(f"edge[{idx}] is invalid: {exc}") from exc


def load_venue(nodes_payload: list[dict[str, Any]], edges_payload: list[dict[str, Any]]) -> VenueData:
    """Parse node and edge record lists into a VenueData snapshot."""
    if not isinstance(nodes_payload, list) or not isinstance(edges_payload, list):
        raise ValueError("nodes and edges must be JSON lists")

    nodes = [node_from_record(rec, idx) for idx, rec in enumerate(nodes_payload)]
    edges = [edge_from_record(rec, idx) for idx, rec in enumerate(edges_payload)]
    return VenueData(nodes=nodes, edges=edges)


def load_venue_json(path: str | Path) -> VenueData:
    """Read `{"nodes": [...], "edges": [...]}` from a JSON file."""
    raw = Path(path).read_text(encoding="utf-8")
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Venue file {path} is not valid JSON") from exc

    if not isinstance(parsed, dict):
        raise ValueError("Venue file must contain a JSON object with nodes and edges")

    venue = load_venue(parsed.get("nodes", []), parsed.get("edges", []))
    logger.info("Loaded venue from %s: %d nodes, %d edges", path, len(venue.nodes), len(venue.edges))
    return venue


def node_to_record(node: Node) -> dict[str, Any]:
    return {
        "qr_id": node.qr_id,
        "node_id": node.node_id,
        "floor": node.floor,
        "x": node.x,
        "y": node.y,
        "type": node.category_label,
        "label": node.label,
    }


def venue_to_payload(venue: VenueData) -> dict[str, Any]:
    """Serialize a venue back into the JSON record shape."""
    return {
        "nodes": [node_to_record(n) for n in venue.nodes],
        "edges": [
            {"from": e.source, "to": e.target, "distance": e.weight, "accessible": e.accessible}
            for e in venue.edges
        ],
    }


# Synthetic multi-floor venue.

_BASE_NODES: list[tuple[str, float, float, str, str]] = [
    ("entrance", 931.02, 364.36, "entrance", "Main Entrance"),
    ("j1", 822.85, 364.36, "junction", "Junction 1"),
    ("j2", 599.68, 364.36, "junction", "Junction 2"),
    ("j3", 484.58, 364.36, "junction", "Junction 3"),
    ("j4", 198.09, 364.36, "junction", "Junction 4"),
    ("j5", 198.09, 1234.32, "junction", "Junction 5"),
    ("j6", 305.98, 1234.32, "junction", "Junction 6"),
    ("j7", 484.58, 1234.32, "junction", "Junction 7"),
    ("j8", 484.58, 1119.12, "junction", "Junction 8"),
    ("j9", 822.85, 1119.12, "junction", "Junction 9"),
    ("cf", 599.68, 305.74, "café", "Café"),
    ("rst", 484.58, 640.78, "restaurant", "Restaurant"),
    ("stair", 198.09, 177.72, "stair", "Staircase"),
    ("ex", 305.98, 1388.67, "exit", "Exit"),
]

_SHOP_POSITIONS: list[tuple[float, float]] = [
    (198.09, 514.4),
    (198.09, 836.88),
    (198.09, 1130.93),
    (484.58, 996.0),
    (198.09, 994.79),
    (822.85, 997.37),
    (647.8, 1119.12),
    (822.85, 841.4),
    (484.58, 894.0),
    (822.85, 622.4),
]

_BASE_EDGES: list[tuple[str, str, float]] = [
    ("entrance", "j1", 10.82),
    ("j1", "j2", 22.32),
    ("j2", "j3", 11.51),
    ("j3", "j4", 28.72),
    ("j1", "shop10", 27.64),
    ("shop10", "shop8", 15.92),
    ("shop8", "shop6", 19.74),
    ("shop6", "j9", 12.17),
    ("j2", "cf", 5.86),
    ("j3", "rst", 27.64),
    ("rst", "shop9", 15.92),
    ("shop9", "shop4", 18.00),
    ("shop4", "j8", 13.91),
    ("j8", "j7", 11.52),
    ("j8", "shop7", 7.60),
    ("shop7", "j9", 26.00),
    ("j7", "j6", 17.86),
    ("j6", "j5", 10.79),
    ("j4", "shop1", 2.10),
    ("j4", "shop2", 47.25),
    ("shop2", "shop5", 15.80),
    ("shop5", "shop3", 13.60),
    ("shop3", "j5", 10.34),
    ("j4", "stair", 18.66),
    ("j6", "ex", 15.43),
]


def _floor_node_id(template_id: str, floor: int) -> str:
    """Map a template id onto its per-floor id (shops are numbered venue-wide)."""
    if template_id.startswith("shop"):
        shop_num = int(template_id[len("shop"):])
        return f"shop{(floor - 1) * SHOPS_PER_FLOOR + shop_num}_{floor}"
    return f"{template_id}_{floor}"


def _nearest_walkable(stair: Node, floor_nodes: list[Node]) -> tuple[Node, float] | None:
    """Nearest non-stair node on the stair's floor by Euclidean distance."""
    candidates = [n for n in floor_nodes if not n.is_connector]
    if not candidates:
        return None

    coords = np.array([n.position for n in candidates], dtype=float)
    dists = np.hypot(coords[:, 0] - stair.x, coords[:, 1] - stair.y)
    best = int(np.argmin(dists))
    return candidates[best], float(dists[best])


def generate_multi_floor_venue(
    floor_count: int = 10,
    stair_weight: float = DEFAULT_STAIR_WEIGHT,
) -> VenueData:
    """Replicate the mall floor template across `floor_count` floors.

    Stair nodes are linked floor-to-floor with `stair_weight` and wired to
    their nearest same-floor walkable node when the template does not already
    connect them.
    """
    if floor_count < 1:
        raise ValueError("floor_count must be >= 1")
    if stair_weight < 0:
        raise ValueError("stair_weight must be >= 0")

    nodes: list[Node] = []
    edges: list[Edge] = []

    for floor in range(1, floor_count + 1):
        floor_nodes: list[Node] = []
        for template_id, x, y, category, label in _BASE_NODES:
            floor_id = _floor_node_id(template_id, floor)
            floor_nodes.append(
                Node(
                    node_id=floor_id,
                    floor=floor,
                    x=x,
                    y=y,
                    category=category,
                    label=f"{label} (Floor {floor})",
                    qr_id=floor_id,
                )
            )

        for shop_num, (x, y) in enumerate(_SHOP_POSITIONS, start=1):
            global_num = (floor - 1) * SHOPS_PER_FLOOR + shop_num
            floor_id = f"shop{global_num}_{floor}"
            floor_nodes.append(
                Node(
                    node_id=floor_id,
                    floor=floor,
                    x=x,
                    y=y,
                    category=NodeCategory.SHOP,
                    label=f"Store {global_num} (Floor {floor})",
                    qr_id=floor_id,
                )
            )

        floor_edges = [
            Edge(_floor_node_id(a, floor), _floor_node_id(b, floor), weight)
            for a, b, weight in _BASE_EDGES
        ]
        linked = {frozenset((e.source, e.target)) for e in floor_edges}

        for stair in (n for n in floor_nodes if n.is_connector):
            nearest = _nearest_walkable(stair, floor_nodes)
            if nearest is None:
                continue
            walkable, dist = nearest
            if frozenset((stair.node_id, walkable.node_id)) in linked:
                continue
            floor_edges.append(Edge(stair.node_id, walkable.node_id, round(dist * METERS_PER_MAP_UNIT, 2)))

        nodes.extend(floor_nodes)
        edges.extend(floor_edges)

    for floor in range(1, floor_count):
        edges.append(Edge(f"stair_{floor}", f"stair_{floor + 1}", stair_weight))

    logger.info("Generated %d-floor venue: %d nodes, %d edges", floor_count, len(nodes), len(edges))
    return VenueData(nodes=nodes, edges=edges)
