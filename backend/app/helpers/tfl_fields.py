"""
Field accessors for pydantic-tfl-api response models.

The library types nested places (hub children) as bare Place models and leg
endpoints as bare Points, so fields such as modes, naptanId and commonName
are read with getattr and may be absent. Every accessor returns None or an
empty list rather than raising.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pydantic_tfl_api.models import Leg


def stop_point_id(stop_point: Any) -> str | None:
    """NaPTAN id of a stop point or place, falling back to its generic id."""
    return getattr(stop_point, "naptanId", None) or getattr(stop_point, "id", None)


def stop_point_modes(stop_point: Any) -> list[str] | None:
    """Modes served by a stop point, or None when the model carries no modes."""
    return getattr(stop_point, "modes", None)


def stop_point_children(stop_point: Any) -> list[Any]:
    return list(getattr(stop_point, "children", None) or [])


def leg_mode_name(leg: Leg) -> str | None:
    return leg.mode.name if leg.mode else None


def leg_route_option_name(leg: Leg) -> str | None:
    """Name of the first route option, which the planner treats as primary."""
    return leg.routeOptions[0].name if leg.routeOptions else None


def leg_path_stop_names(leg: Leg) -> list[str]:
    """Names of the stops listed on a leg's path; TfL only sometimes includes them."""
    if not leg.path:
        return []
    stops = getattr(leg.path, "stopPoints", None) or getattr(leg.path, "stopList", None) or []
    return [name for stop in stops if (name := getattr(stop, "name", None))]


def leg_from_name(leg: Leg) -> str | None:
    """Departure point name, or the first path stop when the point has no name."""
    name = getattr(leg.departurePoint, "commonName", None)
    if name:
        return name
    stops = leg_path_stop_names(leg)
    return stops[0] if stops else None


def leg_to_name(leg: Leg) -> str | None:
    """Arrival point name, or the last path stop when the point has no name."""
    name = getattr(leg.arrivalPoint, "commonName", None)
    if name:
        return name
    stops = leg_path_stop_names(leg)
    return stops[-1] if stops else None


def leg_instruction_summary(leg: Leg) -> str | None:
    return leg.instruction.summary if leg.instruction else None
