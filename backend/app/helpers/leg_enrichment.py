"""
Leg enrichment: turn a raw Journey Planner leg into an EnrichedLeg.

Pure functions over a raw TfL leg and a cache-only sequence lookup. Rail legs
get a full stop list whose first and last entries always name the leg's own
endpoints; walking, bus and other non-rail legs pass through with no stops.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.helpers.station_names import clean_line_name, dedupe_station_names, same_station
from app.helpers.stop_resolution import MIN_RESOLVED_STOPS, SequenceLookup, resolve_stops
from app.helpers.tfl_fields import (
    leg_from_name,
    leg_instruction_summary,
    leg_mode_name,
    leg_path_stop_names,
    leg_route_option_name,
    leg_to_name,
)
from app.schemas.journey import EnrichedLeg

if TYPE_CHECKING:
    from pydantic_tfl_api.models import Leg

# Modes that are never stop-sequence enriched
UNENRICHED_MODES = frozenset({"walking", "bus", "replacement-bus", "coach", "cable-car", "cycle", "tram"})


def is_enrichable_mode(mode: str | None) -> bool:
    """Return True for rail modes whose stops can be recovered from line sequences."""
    return mode not in UNENRICHED_MODES


def leg_line_name(leg: Leg) -> str | None:
    """Cleaned line name of a raw leg, falling back to its mode name."""
    return clean_line_name(leg_route_option_name(leg) or leg_mode_name(leg))


def enforce_endpoints(stops: list[str], from_name: str | None, to_name: str | None) -> list[str]:
    """
    Make sure a stop list starts at from_name and ends at to_name.

    Prepends/appends the endpoint when the boundary stop does not normalize to
    it, so the invariant holds even when the resolved sequence was partial. An
    endpoint found elsewhere in the list is moved rather than repeated.
    When both endpoints name the same station the leg collapses to [from_name].

    Examples:
        >>> enforce_endpoints(["B", "C"], "A", "D")
        ['A', 'B', 'C', 'D']
        >>> enforce_endpoints(["B", "A", "C"], "A", "C")
        ['A', 'B', 'C']
    """
    if from_name is not None and to_name is not None and same_station(from_name, to_name):
        return [from_name]

    result = list(stops)
    if from_name is not None and (not result or not same_station(result[0], from_name)):
        result = [from_name, *(stop for stop in result if not same_station(stop, from_name))]
    if to_name is not None and (not result or not same_station(result[-1], to_name)):
        head = result[:1] if from_name is not None else []
        tail = (stop for stop in result[len(head) :] if not same_station(stop, to_name))
        result = [*head, *tail, to_name]
    return result


def _candidate_stops(leg: Leg, line_name: str | None, sequences_for: SequenceLookup) -> list[str]:
    path_stops = leg_path_stop_names(leg)
    if len(path_stops) >= MIN_RESOLVED_STOPS:
        return path_stops

    from_name, to_name = leg_from_name(leg) or "", leg_to_name(leg) or ""
    tried: set[str] = set()
    for candidate in (line_name, leg_route_option_name(leg), leg_mode_name(leg)):
        if not candidate or candidate in tried:
            continue
        tried.add(candidate)
        resolved = resolve_stops(candidate, from_name, to_name, sequences_for)
        if resolved and len(resolved) >= MIN_RESOLVED_STOPS:
            return resolved

    return [name for name in (from_name, to_name) if name]


def enrich_leg(leg: Leg, sequences_for: SequenceLookup) -> EnrichedLeg:
    """
    Convert a raw leg into an EnrichedLeg with a resolved stop list.

    Stop source preference for rail legs:
    1. The partial stop list already on the leg, if it has two or more stops
    2. resolve_stops() with the cleaned line name, the raw route option name,
       then the mode name; the first to give two or more stops wins
    3. Just the two endpoints

    The list is then deduplicated by normalized name and its endpoints enforced.

    Args:
        leg: Raw leg from the Journey Planner
        sequences_for: Cache-only lookup from line id to stop sequences

    Returns:
        EnrichedLeg; stops is empty for walking, bus and other unenriched modes
    """
    line_name = leg_line_name(leg)
    mode = leg_mode_name(leg)
    from_name, to_name = leg_from_name(leg), leg_to_name(leg)
    fields = {
        "mode": mode,
        "line_name": line_name,
        "departure_point": from_name,
        "arrival_point": to_name,
        "departure_time": leg.departureTime,
        "arrival_time": leg.arrivalTime,
        "duration": leg.duration,
        "instruction": leg_instruction_summary(leg),
    }

    if not is_enrichable_mode(mode):
        return EnrichedLeg(**fields, stops=[])

    stops = dedupe_station_names(_candidate_stops(leg, line_name, sequences_for))
    return EnrichedLeg(**fields, stops=enforce_endpoints(stops, from_name, to_name))
