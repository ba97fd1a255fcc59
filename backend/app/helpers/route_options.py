"""
Route option helpers: signatures, grouping, ranking and filtering.

Two signatures are used. The raw signature, built from the Journey Planner's
own mode and route option names, deduplicates and groups itineraries before
enrichment. The line signature, built from cleaned line names of the final rail
legs, removes routes that only differed in naming after merging.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Callable, Iterable, Sequence
from typing import TYPE_CHECKING, TypeVar

from app.helpers.station_names import names_match
from app.helpers.tfl_fields import leg_mode_name, leg_route_option_name
from app.schemas.journey import EnrichedLeg, JourneyOption, RouteOption

if TYPE_CHECKING:
    from pydantic_tfl_api.models import Journey

T = TypeVar("T")

WALKING_MODE = "walking"

# Routes using any of these are dropped from the final answer
BANNED_MODES = frozenset({"bus", "replacement-bus", "coach", "national-rail", "tram", "cable-car", "ferry"})

_LATEST = dt.datetime.max


def raw_route_signature(journey: Journey) -> str:
    """
    Signature of an itinerary from its raw (mode, route option) pairs.

    Examples:
        "walking:|tube:Central|dlr:DLR"
    """
    return "|".join(f"{leg_mode_name(leg)}:{leg_route_option_name(leg) or ''}" for leg in journey.legs or [])


def line_signature(legs: Sequence[EnrichedLeg]) -> str:
    """Signature of a route from its enriched (mode, cleaned line name) pairs."""
    return "|".join(f"{leg.mode}:{leg.line_name}" for leg in legs)


def dedupe_by(items: Iterable[T], key: Callable[[T], str]) -> list[T]:
    """Keep the first item for each key, preserving order. Idempotent."""
    seen: set[str] = set()
    result = []
    for item in items:
        item_key = key(item)
        if item_key in seen:
            continue
        seen.add(item_key)
        result.append(item)
    return result


def group_by(items: Iterable[T], key: Callable[[T], str]) -> dict[str, list[T]]:
    """Group items by key; groups and their members keep first-seen order."""
    groups: dict[str, list[T]] = {}
    for item in items:
        groups.setdefault(key(item), []).append(item)
    return groups


def transport_legs(legs: Iterable[EnrichedLeg]) -> list[EnrichedLeg]:
    """Legs that are not walking."""
    return [leg for leg in legs if leg.mode != WALKING_MODE]


def build_journey_option(journey: Journey, legs: list[EnrichedLeg]) -> JourneyOption:
    """Wrap merged legs with journey-level timings taken from the raw itinerary."""
    return JourneyOption(
        start_date_time=journey.legs[0].departureTime if journey.legs else None,
        arrival_date_time=journey.legs[-1].arrivalTime if journey.legs else None,
        total_duration=journey.duration,
        legs=legs,
    )


def build_route_option(departures: Sequence[JourneyOption], origin: str, destination: str) -> RouteOption:
    """
    Build a route from the departures sharing one signature.

    Departures are sorted by start time; the earliest one supplies the route's
    duration and its canonical (non-walking) legs.

    Raises:
        ValueError: If departures is empty
    """
    if not departures:
        msg = "Cannot build a route option without departures"
        raise ValueError(msg)

    ordered = sorted(departures, key=lambda option: option.start_date_time or _LATEST)
    canonical = transport_legs(ordered[0].legs)
    first = canonical[0] if canonical else None
    return RouteOption(
        mode=(first.mode if first else None) or "unknown",
        line_name=(first.line_name if first else None) or "",
        origin=origin,
        destination=destination,
        total_duration=ordered[0].total_duration,
        legs=canonical,
        departures=ordered,
    )


def rank_routes(routes: Iterable[RouteOption]) -> list[RouteOption]:
    """Order routes by fewest rail legs, then shortest duration (stable)."""
    return sorted(routes, key=lambda route: (len(route.legs), route.total_duration or 0))


def uses_banned_mode(route: RouteOption) -> bool:
    """Return True if any rail leg of the earliest departure uses a banned mode."""
    legs = route.departures[0].legs if route.departures else route.legs
    return any(leg.mode in BANNED_MODES for leg in transport_legs(legs))


def ends_at_destination(route: RouteOption, destination: str) -> bool:
    """Return True if the last rail leg arrives at (a fuzzy match of) the destination."""
    legs = transport_legs(route.departures[0].legs if route.departures else route.legs)
    if not legs:
        return False
    return names_match(legs[-1].arrival_point, destination)


def filter_routes(routes: Iterable[RouteOption], destination: str) -> list[RouteOption]:
    """
    Drop unusable routes and collapse routes with identical line signatures.

    A route is dropped if it uses a banned mode or its last rail leg stops short
    of the requested destination. Of the remaining routes, the first per line
    signature is kept.
    """
    usable = [route for route in routes if not uses_banned_mode(route) and ends_at_destination(route, destination)]
    return dedupe_by(usable, lambda route: line_signature(route.legs))
