"""Resolve scanned QR payloads to venue nodes.

Accepted payloads:
- a bare node id: `cf_2`
- a tagged id: `NODE:cf_2`
- a JSON object with a `node_id` field, optionally tagged: `{"node_id": "cf_2"}`

Resolution is an exact `Graph.get_node` lookup; nothing fuzzy.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from mallnav.models import Node

if TYPE_CHECKING:
    from mallnav.graph import Graph

SCAN_TAG = "NODE:"


def parse_scan_payload(raw: str) -> str:
    """Extract the node id carried by a scanned QR string."""
    text = (raw or "").strip()
    if text[: len(SCAN_TAG)].upper() == SCAN_TAG:
        text = text[len(SCAN_TAG):].strip()
    if not text:
        raise ValueError("Scan payload is empty")

    if text.startswith("{"):
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError("Scan payload looks like JSON but could not be parsed") from exc
        node_id = parsed.get("node_id") if isinstance(parsed, dict) else None
        if not isinstance(node_id, str) or not node_id.strip():
            raise ValueError("Scan payload JSON must include a node_id string")
        return node_id.strip()

    return text


def resolve_scan(graph: Graph, raw: str) -> Node | None:
    return graph.get_node(parse_scan_payload(raw))
