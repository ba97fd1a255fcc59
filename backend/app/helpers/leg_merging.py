"""
Leg merging: rejoin one train ride that the Journey Planner split in two.

TfL sometimes reports a continuous ride as back-to-back legs on the same line
(crew changes, a line continuing under a new route option). Consecutive legs
are collapsed when they are on the same mode and line, meet at the same
station, and the second departs within a minute of the first arriving.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import timedelta

from app.helpers.station_names import dedupe_station_names, same_station
from app.schemas.journey import EnrichedLeg

DEFAULT_MAX_GAP = timedelta(minutes=1)


def is_continuation(previous: EnrichedLeg, current: EnrichedLeg, max_gap: timedelta = DEFAULT_MAX_GAP) -> bool:
    """Return True if current continues the same vehicle ride as previous."""
    if previous.mode != current.mode or previous.line_name != current.line_name:
        return False
    if not same_station(previous.arrival_point, current.departure_point):
        return False
    if previous.arrival_time is None or current.departure_time is None:
        return False
    return current.departure_time - previous.arrival_time <= max_gap


def combine_legs(previous: EnrichedLeg, current: EnrichedLeg) -> EnrichedLeg:
    """Join two continuous legs into one, keeping the junction stop once."""
    head = previous.stops or [previous.departure_point]
    tail = current.stops[1:] if len(current.stops) >= 2 else [current.arrival_point]
    stops = dedupe_station_names([stop for stop in (*head, *tail) if stop])

    return previous.model_copy(
        update={
            "arrival_point": current.arrival_point,
            "arrival_time": current.arrival_time,
            "duration": (previous.duration or 0) + (current.duration or 0),
            "instruction": current.instruction or previous.instruction,
            "stops": stops,
        }
    )


def merge_legs(legs: Iterable[EnrichedLeg], max_gap: timedelta = DEFAULT_MAX_GAP) -> list[EnrichedLeg]:
    """
    Collapse consecutive legs that belong to one continuous ride.

    Pure: input legs are not modified. Merging is associative, so a run of
    three mergeable legs ends up as one leg whichever way it is grouped.

    Args:
        legs: Enriched legs in travel order
        max_gap: Longest allowed wait between arrival and the next departure

    Returns:
        Legs in travel order with continuous rides merged
    """
    merged: list[EnrichedLeg] = []
    for leg in legs:
        if merged and is_continuation(merged[-1], leg, max_gap):
            merged[-1] = combine_legs(merged[-1], leg)
        else:
            merged.append(leg)
    return merged
