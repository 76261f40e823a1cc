"""Dijkstra shortest path restricted to one floor of a venue graph.

Purpose:
- Compute shortest walking routes between two nodes on the same floor.
- Provide single-source distance maps used to rank vertical connectors.

Usage example:
    >>> from mallnav.pathfinding import same_floor_path
    >>> same_floor_path(graph, "entrance_1", "cf_1")
"""

from __future__ import annotations

import heapq
import itertools
import logging
from typing import TYPE_CHECKING

from mallnav.models import PathResult

if TYPE_CHECKING:
    from mallnav.graph import Graph

logger = logging.getLogger(__name__)


def _dijkstra(
    graph: Graph,
    start_id: str,
    floor: int,
    goal_id: str | None = None,
) -> tuple[dict[str, float], dict[str, str]]:
    """Run Dijkstra from `start_id` over `floor`'s nodes.

    Args:
        graph: Venue graph.
        start_id: Source node id.
        floor: Floor whose nodes may be expanded.
        goal_id: Optional target; search stops once it is settled. The goal is
            admissible even if it sits on another floor.

    Returns:
        Tuple of settled/tentative distances and predecessor links.
    """
    dist: dict[str, float] = {n.node_id: float("inf") for n in graph.get_nodes_by_floor(floor)}
    dist[start_id] = 0.0
    came_from: dict[str, str] = {}
    closed: set[str] = set()

    # Counter keeps heap ordering stable for equal distances.
    counter = itertools.count()
    open_heap: list[tuple[float, int, str]] = [(0.0, next(counter), start_id)]

    while open_heap:
        current_dist, _, current = heapq.heappop(open_heap)

        if current in closed:
            continue
        closed.add(current)

        if current == goal_id:
            break

        for neighbor, weight in graph.neighbors(current).items():
            if neighbor in closed:
                continue
            if neighbor not in dist and neighbor != goal_id:
                continue

            tentative = current_dist + weight
            if tentative < dist.get(neighbor, float("inf")):
                dist[neighbor] = tentative
                came_from[neighbor] = current
                heapq.heappush(open_heap, (tentative, next(counter), neighbor))

    return dist, came_from


def shortest_distances(graph: Graph, start_id: str, floor: int | None = None) -> dict[str, float]:
    """Return finite shortest distances from `start_id` to nodes on one floor.

    `floor` defaults to the start node's floor. Unknown start ids yield `{}`.
    """
    start = graph.get_node(start_id)
    if start is None:
        return {}

    dist, _ = _dijkstra(graph, start_id, start.floor if floor is None else floor)
    return {node_id: d for node_id, d in dist.items() if d != float("inf")}


def same_floor_path(graph: Graph, start_id: str, end_id: str) -> PathResult | None:
    """Compute the shortest same-floor path between two node ids.

    Returns:
        PathResult with `floor_change=False`, or None when either node is
        unknown or the target cannot be reached on the start floor.
    """
    start = graph.get_node(start_id)
    end = graph.get_node(end_id)
    if start is None or end is None:
        return None

    if start_id == end_id:
        return PathResult(path=[start_id], distance=0.0)

    dist, came_from = _dijkstra(graph, start_id, start.floor, goal_id=end_id)

    current = end_id
    path = [current]
    while current in came_from:
        current = came_from[current]
        path.append(current)
    path.reverse()

    if path[0] != start_id:
        logger.debug("No same-floor path from %s to %s on floor %d", start_id, end_id, start.floor)
        return None

    return PathResult(path=path, distance=dist[end_id], floor_change=False)
