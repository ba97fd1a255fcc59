"""
Node pair helpers for Journey Planner queries.

A station name can resolve to a hub holding one NaPTAN node per mode (e.g.
Stratford has Underground, DLR and national-rail-network nodes). The Journey
Planner answers differently depending on which nodes it is given, so every
plausible origin/destination node pair is queried.
"""

from __future__ import annotations

import enum
from collections.abc import Sequence


class NodeMode(str, enum.Enum):
    """Rail network a NaPTAN node belongs to, identified by id prefix."""

    TUBE = "tube"
    DLR = "dlr"
    RAIL = "rail"  # 910G nodes: Elizabeth line and Overground


# Checked in order; the first matching prefix classifies the node
NODE_PREFIXES: tuple[tuple[str, NodeMode], ...] = (
    ("940GZZLU", NodeMode.TUBE),
    ("940GZZD", NodeMode.DLR),
    ("910G", NodeMode.RAIL),
)

# Prefixes of child nodes worth querying when a hub is expanded
RAIL_NODE_PREFIXES = ("940G", "910G")

HUB_PREFIX = "HUB"

# Cross-network (origin, destination) combinations, in query order
CROSS_MODE_ORDER: tuple[tuple[NodeMode, NodeMode], ...] = (
    (NodeMode.TUBE, NodeMode.DLR),
    (NodeMode.DLR, NodeMode.TUBE),
    (NodeMode.TUBE, NodeMode.RAIL),
    (NodeMode.DLR, NodeMode.RAIL),
    (NodeMode.RAIL, NodeMode.TUBE),
    (NodeMode.RAIL, NodeMode.DLR),
)


def classify_node(node_id: str) -> NodeMode | None:
    """
    Return the rail network a node id belongs to, or None if unrecognised.

    Examples:
        >>> classify_node("940GZZLUBNK")
        <NodeMode.TUBE: 'tube'>
        >>> classify_node("HUBSRA") is None
        True
    """
    for prefix, mode in NODE_PREFIXES:
        if node_id.startswith(prefix):
            return mode
    return None


def nodes_by_mode(node_ids: Sequence[str]) -> dict[NodeMode, str]:
    """Map each rail network to the first node id of that network, in NODE_PREFIXES order."""
    found: dict[NodeMode, str] = {}
    for node_id in node_ids:
        mode = classify_node(node_id)
        if mode is not None and mode not in found:
            found[mode] = node_id
    return {mode: found[mode] for _, mode in NODE_PREFIXES if mode in found}


def pick_best_node(node_ids: Sequence[str]) -> str | None:
    """Prefer an Underground node, then DLR, then national rail network, then the first id."""
    by_mode = nodes_by_mode(node_ids)
    for _, mode in NODE_PREFIXES:
        if mode in by_mode:
            return by_mode[mode]
    return node_ids[0] if node_ids else None


def build_node_pairs(from_ids: Sequence[str], to_ids: Sequence[str]) -> list[tuple[str, str]]:
    """
    Build the ordered list of (origin node, destination node) pairs to query.

    Order: same-network pairs, then the cross-network combinations in
    CROSS_MODE_ORDER, then the best-guess pair. Duplicates and pairs whose two
    ends are the same node are dropped.

    Examples:
        >>> build_node_pairs(["940GZZLUSTD", "910GSTFD"], ["940GZZLUBNK"])
        [('940GZZLUSTD', '940GZZLUBNK'), ('910GSTFD', '940GZZLUBNK')]
    """
    from_modes = nodes_by_mode(from_ids)
    to_modes = nodes_by_mode(to_ids)

    candidates: list[tuple[str | None, str | None]] = [
        (from_modes[mode], to_modes[mode]) for mode in from_modes if mode in to_modes
    ]
    candidates.extend(
        (from_modes[from_mode], to_modes[to_mode])
        for from_mode, to_mode in CROSS_MODE_ORDER
        if from_mode in from_modes and to_mode in to_modes
    )
    candidates.append((pick_best_node(from_ids), pick_best_node(to_ids)))

    pairs: list[tuple[str, str]] = []
    for from_id, to_id in candidates:
        if not from_id or not to_id or from_id == to_id:
            continue
        if (from_id, to_id) not in pairs:
            pairs.append((from_id, to_id))
    return pairs
