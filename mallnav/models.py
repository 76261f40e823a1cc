"""Spatial entity records for venue routing.

Purpose:
- Describe venue points (`Node`) and walkable links (`Edge`).
- Carry routing output (`PathResult`) back to callers.

Usage example:
    >>> from mallnav.models import Edge, Node, NodeCategory
    >>> a = Node("A", floor=1, x=0.0, y=0.0, category=NodeCategory.ENTRANCE, label="Main Entrance")
    >>> Edge("A", "B", 10.0)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum


class NodeCategory(str, Enum):
    """Closed set of node categories, with `OTHER` for anything unrecognised."""

    ENTRANCE = "entrance"
    EXIT = "exit"
    JUNCTION = "junction"
    SHOP = "shop"
    CAFE = "café"
    RESTAURANT = "restaurant"
    STAIR = "stair"
    OTHER = "other"

    @classmethod
    def parse(cls, raw: str | NodeCategory) -> NodeCategory:
        """Map raw category text onto a member; unknown text becomes `OTHER`."""
        if isinstance(raw, NodeCategory):
            return raw
        text = str(raw).strip().lower()
        if text == "cafe":
            return cls.CAFE
        for member in cls:
            if member.value == text:
                return member
        return cls.OTHER


@dataclass(frozen=True, slots=True)
class Node:
    """One addressable point of a venue floor."""

    node_id: str
    floor: int
    x: float
    y: float
    category: NodeCategory
    label: str
    qr_id: str = ""
    category_label: str = ""

    def __post_init__(self) -> None:
        if not self.node_id:
            raise ValueError("node_id must be a non-empty string")
        if int(self.floor) < 1:
            raise ValueError(f"Node '{self.node_id}' floor must be >= 1")

        # Frozen dataclass: normalise through object.__setattr__.
        object.__setattr__(self, "floor", int(self.floor))
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "y", float(self.y))
        raw_category = self.category
        category = NodeCategory.parse(raw_category)
        object.__setattr__(self, "category", category)
        if not self.qr_id:
            object.__setattr__(self, "qr_id", self.node_id)
        if not self.category_label:
            text = category.value if isinstance(raw_category, NodeCategory) else str(raw_category).strip()
            object.__setattr__(self, "category_label", text or category.value)

    @property
    def is_connector(self) -> bool:
        """True for stair/escalator nodes."""
        return self.category is NodeCategory.STAIR

    @property
    def position(self) -> tuple[float, float]:
        return self.x, self.y


@dataclass(frozen=True, slots=True)
class Edge:
    """Undirected weighted walking link between two node ids."""

    source: str
    target: str
    weight: float
    accessible: bool = True

    def __post_init__(self) -> None:
        weight = float(self.weight)
        if not math.isfinite(weight):
            raise ValueError(f"Edge {self.source}-{self.target} weight must be finite")
        if weight < 0:
            raise ValueError(f"Edge {self.source}-{self.target} weight must be >= 0")
        object.__setattr__(self, "weight", weight)

    def is_vertical_link(self, nodes: dict[str, Node]) -> bool:
        """Return True when both endpoints are known stair nodes."""
        a = nodes.get(self.source)
        b = nodes.get(self.target)
        return a is not None and b is not None and a.is_connector and b.is_connector


@dataclass(slots=True)
class PathResult:
    """Structured routing result payload."""

    path: list[str] = field(default_factory=list)
    distance: float = 0.0
    floor_change: bool = False
    target_floor: int | None = None
    message: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.path
