"""Immutable venue graph and routing entry point.

The graph is built once from a full node/edge snapshot. Edges are indexed
symmetrically (`node_id -> {neighbor_id -> weight}`); edges that reference
unknown nodes are kept out of the index. Routing requests are dispatched to
the same-floor pathfinder or the cross-floor router based on endpoint floors.
"""

from __future__ import annotations

import logging
from collections import deque
from types import MappingProxyType
from typing import Iterable, Mapping

from mallnav.cross_floor import route_across_floors
from mallnav.models import Edge, Node, NodeCategory, PathResult
from mallnav.pathfinding import same_floor_path

logger = logging.getLogger(__name__)


class Graph:
    """Read-only adjacency view over one venue dataset."""

    def __init__(
        self,
        nodes: Iterable[Node] | None,
        edges: Iterable[Edge] | None,
        accessible_only: bool = False,
    ) -> None:
        if nodes is None:
            raise ValueError("nodes cannot be None")
        if edges is None:
            raise ValueError("edges cannot be None")

        self.accessible_only = bool(accessible_only)

        node_index: dict[str, Node] = {}
        adjacency: dict[str, dict[str, float]] = {}
        for node in nodes:
            if node.node_id in node_index:
                raise ValueError(f"Duplicate node_id '{node.node_id}'")
            node_index[node.node_id] = node
            adjacency[node.node_id] = {}

        edge_count = 0
        vertical_links = 0
        skipped_inaccessible = 0
        dangling = 0
        for edge in edges:
            if self.accessible_only and not edge.accessible:
                skipped_inaccessible += 1
                continue
            if edge.source not in adjacency or edge.target not in adjacency:
                dangling += 1
                continue
            adjacency[edge.source][edge.target] = edge.weight
            adjacency[edge.target][edge.source] = edge.weight
            edge_count += 1
            if edge.is_vertical_link(node_index):
                vertical_links += 1

        logger.debug("Indexed %d edge(s), %d vertical link(s)", edge_count, vertical_links)
        if dangling:
            logger.debug("Ignored %d edge(s) with unknown endpoints", dangling)
        if skipped_inaccessible:
            logger.debug("Skipped %d non-accessible edge(s)", skipped_inaccessible)

        self._nodes: Mapping[str, Node] = MappingProxyType(node_index)
        self._adjacency: Mapping[str, Mapping[str, float]] = MappingProxyType(
            {node_id: MappingProxyType(nbrs) for node_id, nbrs in adjacency.items()}
        )
        self._edge_count = edge_count

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        """Number of edges that made it into the adjacency index."""
        return self._edge_count

    # Routing.

    def get_shortest_path(self, start_id: str, end_id: str) -> PathResult | None:
        """Route between two node ids.

        Returns:
            PathResult, or None when either id is unknown or no same-floor
            path exists. Cross-floor requests always return a PathResult whose
            `message` carries connector guidance.
        """
        start = self._nodes.get(start_id)
        end = self._nodes.get(end_id)
        if start is None or end is None:
            return None

        if start.floor == end.floor:
            return same_floor_path(self, start_id, end_id)
        return route_across_floors(self, start_id, end_id)

    # Read accessors.

    def get_node(self, node_id: str) -> Node | None:
        return self._nodes.get(node_id)

    def get_all_nodes(self) -> list[Node]:
        return list(self._nodes.values())

    def get_nodes_by_type(self, category: NodeCategory | str) -> list[Node]:
        """Return nodes of one category, in construction order."""
        wanted = NodeCategory.parse(category)
        if wanted is NodeCategory.OTHER and not isinstance(category, NodeCategory):
            # Open categories are matched on their raw text.
            text = str(category).strip().lower()
            return [n for n in self._nodes.values() if n.category_label.lower() == text]
        return [n for n in self._nodes.values() if n.category is wanted]

    def get_nodes_by_floor(self, floor: int) -> list[Node]:
        return [n for n in self._nodes.values() if n.floor == floor]

    def neighbors(self, node_id: str) -> Mapping[str, float]:
        """Return read-only neighbor -> weight mapping (empty for unknown ids)."""
        return self._adjacency.get(node_id, MappingProxyType({}))

    def get_floors(self) -> list[int]:
        return sorted({n.floor for n in self._nodes.values()})

    def get_connected_floors(self, floor: int) -> list[int]:
        """Floors one stair-to-stair hop away from `floor`'s connectors."""
        connected: set[int] = set()
        for node in self.get_nodes_by_floor(floor):
            if not node.is_connector:
                continue
            for neighbor_id in self.neighbors(node.node_id):
                neighbor = self._nodes[neighbor_id]
                if neighbor.is_connector and neighbor.floor != floor:
                    connected.add(neighbor.floor)
        return sorted(connected)

    def search_nodes(self, query: str) -> list[Node]:
        """Case-insensitive substring search over label, category and id."""
        needle = (query or "").casefold()
        if not needle.strip():
            return self.get_all_nodes()

        matches: list[Node] = []
        for node in self._nodes.values():
            haystacks = [node.label, node.category_label, node.node_id]
            # OTHER's enum value is a placeholder, not the node's category text.
            if node.category is not NodeCategory.OTHER:
                haystacks.append(node.category.value)
            if any(needle in text.casefold() for text in haystacks):
                matches.append(node)
        return matches

    def get_reachable_nodes(self, start_id: str, max_distance: float) -> dict[str, float]:
        """Return every node within `max_distance` (inclusive) of `start_id`.

        Relaxed breadth-first expansion: a node is re-queued only when a new
        distance fits the budget and improves its best known distance.
        """
        if max_distance < 0:
            raise ValueError("max_distance must be >= 0")
        if start_id not in self._nodes:
            return {}

        best: dict[str, float] = {start_id: 0.0}
        queue: deque[str] = deque([start_id])

        while queue:
            current = queue.popleft()
            base = best[current]
            for neighbor, weight in self.neighbors(current).items():
                candidate = base + weight
                if candidate > max_distance:
                    continue
                if candidate < best.get(neighbor, float("inf")):
                    best[neighbor] = candidate
                    queue.append(neighbor)

        return best
