"""
Station resolution helpers: from a searched station name to queryable node ids.

A StopPoint search returns either a single mode node (e.g. 940GZZLUBNK) or a
hub (e.g. HUBSRA) that groups one node per mode. Hubs are expanded to their
rail children so each network can be queried separately.
"""

from __future__ import annotations

from collections.abc import Collection, Iterator
from typing import TYPE_CHECKING, Any

from app.helpers.node_pairs import HUB_PREFIX, RAIL_NODE_PREFIXES
from app.helpers.tfl_fields import stop_point_children, stop_point_id, stop_point_modes

if TYPE_CHECKING:
    from pydantic_tfl_api.models import StopPoint


def is_hub_id(node_id: str) -> bool:
    """Return True if the id names a hub rather than a single mode node."""
    return node_id.startswith(HUB_PREFIX)


def _walk_descendants(stop_point: Any, depth: int) -> Iterator[Any]:
    """Yield descendants down to the given depth, each child followed by its own children."""
    if depth <= 0:
        return
    for child in stop_point_children(stop_point):
        yield child
        yield from _walk_descendants(child, depth - 1)


def rail_child_ids(hub: StopPoint, allowed_modes: Collection[str]) -> list[str]:
    """
    Collect the rail node ids below a hub.

    Children and grandchildren qualify when their id starts with one of
    RAIL_NODE_PREFIXES and they serve at least one of allowed_modes. A child
    whose model carries no modes at all (a bare Place) qualifies on its id
    prefix alone. Duplicates are dropped, first occurrence wins.

    Args:
        hub: StopPoint/{id} response for a hub
        allowed_modes: TfL mode names worth querying (e.g. "tube", "dlr")

    Returns:
        Node ids in the order TfL lists them (may be empty)
    """
    ids: list[str] = []
    for child in _walk_descendants(hub, depth=2):
        node_id = stop_point_id(child)
        if not node_id or not node_id.startswith(RAIL_NODE_PREFIXES):
            continue
        modes = stop_point_modes(child)
        if modes is not None and not any(mode in allowed_modes for mode in modes):
            continue
        if node_id not in ids:
            ids.append(node_id)
    return ids


class JourneyNotFoundError(Exception):
    """Base exception for journey requests that cannot be answered."""

    pass


class StationNotFoundError(JourneyNotFoundError):
    """Raised when a station name has no StopPoint search match."""

    def __init__(self, station_name: str) -> None:
        self.station_name = station_name
        super().__init__(f"Could not find station matching '{station_name}'.")


class NoJourneysFoundError(JourneyNotFoundError):
    """Raised when TfL returns no usable itinerary between two stations."""

    def __init__(self, origin: str, destination: str) -> None:
        self.origin = origin
        self.destination = destination
        super().__init__(f"No journeys found from '{origin}' to '{destination}'.")
