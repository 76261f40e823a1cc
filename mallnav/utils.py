"""Helpers shared by the API layer.

Purpose:
- Estimate walking time for a route.
- Expand a PathResult into labelled steps.
- Convert nodes and results to JSON-safe payloads.
"""

from __future__ import annotations

from typing import Any

from mallnav.graph import Graph
from mallnav.models import Node, PathResult

WALKING_SPEED_M_PER_S = 1.4


def estimate_walk_seconds(distance_m: float, speed_m_per_s: float = WALKING_SPEED_M_PER_S) -> float:
    """Walking time in seconds for `distance_m` at a constant speed."""
    if speed_m_per_s <= 0:
        raise ValueError("speed_m_per_s must be > 0")
    if distance_m < 0:
        raise ValueError("distance_m must be >= 0")
    return float(distance_m) / float(speed_m_per_s)


def serialize_node(node: Node) -> dict[str, Any]:
    return {
        "node_id": node.node_id,
        "qr_id": node.qr_id,
        "floor": node.floor,
        "x": node.x,
        "y": node.y,
        "category": node.category.value,
        "type": node.category_label,
        "label": node.label,
    }


def route_steps(graph: Graph, result: PathResult) -> list[dict[str, Any]]:
    """Return path node ids expanded with label, floor and category."""
    steps: list[dict[str, Any]] = []
    for node_id in result.path:
        node = graph.get_node(node_id)
        if node is None:
            steps.append({"node_id": node_id, "label": node_id, "floor": None, "category": None})
            continue
        steps.append(
            {
                "node_id": node_id,
                "label": node.label,
                "floor": node.floor,
                "category": node.category.value,
            }
        )
    return steps


def serialize_path_result(result: PathResult) -> dict[str, Any]:
    return {
        "path": list(result.path),
        "distance": float(result.distance),
        "floor_change": bool(result.floor_change),
        "target_floor": result.target_floor,
        "message": result.message,
    }


def group_nodes_by_category(nodes: list[Node]) -> dict[str, list[Node]]:
    """Group nodes by raw category text, keeping first-seen group order."""
    grouped: dict[str, list[Node]] = {}
    for node in nodes:
        grouped.setdefault(node.category_label, []).append(node)
    return grouped
