"""Cross-floor routing policy.

When origin and destination sit on different floors no stitched multi-floor
path is produced. Instead the router walks the user to the best stair or
escalator on the origin floor and returns guidance; the user changes floors
physically and scans a new QR code to continue.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from mallnav.connectivity import connector_reaches_floor
from mallnav.models import Node, PathResult
from mallnav.pathfinding import same_floor_path

if TYPE_CHECKING:
    from mallnav.graph import Graph

logger = logging.getLogger(__name__)

NO_CONNECTOR_MESSAGE = "No stairs or escalators on floor {floor}."
TAKE_CONNECTOR_MESSAGE = (
    "Take {connector} to floor {target_floor}, then scan a QR code to continue to {destination}."
)
FALLBACK_CONNECTOR_MESSAGE = (
    "Use the nearest stairs or escalator ({connector}) to reach floor {target_floor}, "
    "then scan a QR code to continue."
)
NO_ROUTE_TO_CONNECTOR_MESSAGE = "No accessible route to stairs or escalators from {origin}."


def _nearest_connector(
    graph: Graph,
    start_id: str,
    connectors: list[Node],
) -> tuple[Node, PathResult] | None:
    """Pick the connector with the shortest same-floor path; first wins ties."""
    best: tuple[Node, PathResult] | None = None
    for connector in connectors:
        result = same_floor_path(graph, start_id, connector.node_id)
        if result is None:
            continue
        if best is None or result.distance < best[1].distance:
            best = (connector, result)
    return best


def route_across_floors(graph: Graph, start_id: str, end_id: str) -> PathResult | None:
    """Route from `start_id` towards a destination on another floor.

    Returns:
        PathResult with `floor_change=True` and guidance in `message`. The path
        ends at the chosen connector, or is empty when no connector can be
        used. None only when either id is unknown.
    """
    start = graph.get_node(start_id)
    end = graph.get_node(end_id)
    if start is None or end is None:
        return None

    target_floor = end.floor
    connectors = [n for n in graph.get_nodes_by_floor(start.floor) if n.is_connector]

    if not connectors:
        logger.debug("Floor %d has no connectors", start.floor)
        return PathResult(
            path=[],
            distance=0.0,
            floor_change=True,
            target_floor=target_floor,
            message=NO_CONNECTOR_MESSAGE.format(floor=start.floor),
        )

    usable = [c for c in connectors if connector_reaches_floor(graph, c.node_id, target_floor)]
    best = _nearest_connector(graph, start_id, usable)
    if best is not None:
        connector, result = best
        return PathResult(
            path=result.path,
            distance=result.distance,
            floor_change=True,
            target_floor=target_floor,
            message=TAKE_CONNECTOR_MESSAGE.format(
                connector=connector.label,
                target_floor=target_floor,
                destination=end.label,
            ),
        )

    # The fallback connector is not verified to reach the target floor.
    fallback = _nearest_connector(graph, start_id, connectors)
    if fallback is not None:
        connector, result = fallback
        logger.warning(
            "No connector on floor %d reaches floor %d; falling back to %s",
            start.floor,
            target_floor,
            connector.node_id,
        )
        return PathResult(
            path=result.path,
            distance=result.distance,
            floor_change=True,
            target_floor=target_floor,
            message=FALLBACK_CONNECTOR_MESSAGE.format(
                connector=connector.label,
                target_floor=target_floor,
            ),
        )

    return PathResult(
        path=[],
        distance=0.0,
        floor_change=True,
        target_floor=target_floor,
        message=NO_ROUTE_TO_CONNECTOR_MESSAGE.format(origin=start.label),
    )
