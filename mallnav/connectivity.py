"""Connector-network reachability probes.

Traversal only follows edges whose neighbor is itself a stair/escalator node,
so walking corridors never count as a way between floors.
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mallnav.graph import Graph


def _connector_neighbors(graph: Graph, node_id: str) -> list[str]:
    out: list[str] = []
    for neighbor_id in graph.neighbors(node_id):
        neighbor = graph.get_node(neighbor_id)
        if neighbor is not None and neighbor.is_connector:
            out.append(neighbor_id)
    return out


def connector_reaches_floor(graph: Graph, connector_id: str, target_floor: int) -> bool:
    """Return True if `connector_id`'s connector network touches `target_floor`."""
    start = graph.get_node(connector_id)
    if start is None:
        return False
    if start.floor == target_floor:
        return True

    q: deque[str] = deque([connector_id])
    visited: set[str] = {connector_id}

    while q:
        cur = q.popleft()
        for nxt in _connector_neighbors(graph, cur):
            if nxt in visited:
                continue
            visited.add(nxt)
            if graph.get_node(nxt).floor == target_floor:
                return True
            q.append(nxt)

    return False


def connector_network(graph: Graph, connector_id: str) -> set[str]:
    """Return every node id in the connector component of `connector_id`."""
    if connector_id not in graph:
        return set()

    q: deque[str] = deque([connector_id])
    visited: set[str] = {connector_id}
    while q:
        cur = q.popleft()
        for nxt in _connector_neighbors(graph, cur):
            if nxt not in visited:
                visited.add(nxt)
                q.append(nxt)
    return visited


def reachable_floors(graph: Graph, connector_id: str) -> list[int]:
    """Sorted floors served by the connector network of `connector_id`."""
    return sorted({graph.get_node(node_id).floor for node_id in connector_network(graph, connector_id)})
