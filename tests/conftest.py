"""Pytest global fixtures and test isolation hooks."""

from __future__ import annotations

import pytest

from mallnav.api import STATE
from mallnav.graph import Graph
from mallnav.models import Edge, Node, NodeCategory
from mallnav.venue_data import generate_multi_floor_venue


@pytest.fixture(autouse=True)
def reset_navigation_state() -> None:
    """Reset in-memory API navigation state before each test."""
    STATE.venue = None
    STATE.graph = None
    STATE.accessible_only = False
    STATE.current_location = None


def _node(node_id: str, floor: int = 1, category: str | NodeCategory = "junction") -> Node:
    """Build a node with a readable default label."""
    return Node(node_id=node_id, floor=floor, x=0.0, y=0.0, category=category, label=f"Node {node_id}")


@pytest.fixture()
def stair_graph() -> Graph:
    """A@1 -5- S1(stair)@1 -10- S2(stair)@2 -3- B@2."""
    nodes = [
        _node("A", 1),
        _node("S1", 1, "stair"),
        _node("S2", 2, "stair"),
        _node("B", 2),
    ]
    edges = [Edge("A", "S1", 5.0), Edge("S1", "S2", 10.0), Edge("S2", "B", 3.0)]
    return Graph(nodes, edges)


@pytest.fixture()
def mall_graph() -> Graph:
    """Three-floor synthetic mall."""
    return generate_multi_floor_venue(floor_count=3).build_graph()
