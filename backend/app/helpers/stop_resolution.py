"""
Stop resolution helpers: recover the stops between two stations on a line.

The Journey Planner often returns a rail leg with only its two endpoints. These
pure functions rebuild the intermediate stops from the line's cached route
sequences. They never fetch anything; the caller passes a cache-only lookup
(LineSequenceCache.peek) that must already be warm.

Resolution order:
1. A single sequence (one branch in one direction) that contains both stations.
2. A one-hop stitch across two sequences of the same line that share a
   junction stop, for journeys that cross between branches.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from app.helpers.line_ids import resolve_line_id
from app.helpers.station_names import find_stop_index, normalize_station_name

StopSequence = tuple[str, ...]
SequenceLookup = Callable[[str], Sequence[StopSequence]]

MIN_RESOLVED_STOPS = 2


def slice_between(stops: Sequence[str], from_index: int, to_index: int) -> list[str]:
    """
    Return the inclusive slice between two indices, oriented in travel order.

    Examples:
        >>> slice_between(["A", "B", "C", "D"], 3, 1)
        ['D', 'C', 'B']
    """
    start, end = min(from_index, to_index), max(from_index, to_index)
    segment = list(stops[start : end + 1])
    if from_index > to_index:
        segment.reverse()
    return segment


def resolve_within_sequence(stops: Sequence[str], from_name: str, to_name: str) -> list[str] | None:
    """Resolve both stations inside one sequence, or return None if either is missing."""
    from_index = find_stop_index(stops, from_name)
    to_index = find_stop_index(stops, to_name)
    if from_index is None or to_index is None:
        return None
    return slice_between(stops, from_index, to_index)


def stitch_sequences(
    first: Sequence[str],
    second: Sequence[str],
    from_name: str,
    to_name: str,
) -> list[str] | None:
    """
    Join two sequences at the first shared stop reached after the origin.

    The junction is the first stop of `first`, at or after the origin, whose
    normalized name also appears in `second`. The result runs origin -> junction
    along `first`, then junction -> destination along `second`, with the
    junction listed once.

    Returns:
        Stitched stop list with at least two stops, or None if the sequences
        do not connect the two stations
    """
    from_index = find_stop_index(first, from_name)
    to_index = find_stop_index(second, to_name)
    if from_index is None or to_index is None:
        return None

    second_keys = [normalize_station_name(stop) for stop in second]
    for junction_index in range(from_index, len(first)):
        junction_key = normalize_station_name(first[junction_index])
        if junction_key in second_keys:
            break
    else:
        return None

    junction_in_second = second_keys.index(junction_key)
    first_part = list(first[from_index : junction_index + 1])
    second_part = slice_between(second, junction_in_second, to_index)
    stitched = first_part[:-1] + second_part
    return stitched if len(stitched) >= MIN_RESOLVED_STOPS else None


def resolve_stops(
    line_name: str | None,
    from_name: str,
    to_name: str,
    sequences_for: SequenceLookup,
) -> list[str] | None:
    """
    Resolve the ordered stops travelled between two stations on a line.

    The first sequence (in cache order) containing both stations wins. If none
    does, the first pair of distinct sequences that can be stitched at a junction
    wins. The stitch is not optimised: with several possible junctions it may not
    be the shortest path.

    Args:
        line_name: Line display name or id (e.g. "Central", "Hammersmith & City")
        from_name: Boarding station name
        to_name: Alighting station name
        sequences_for: Cache-only lookup from line id to stop sequences

    Returns:
        Stop names from the boarding to the alighting station inclusive, or
        None if the line is unknown or the stations cannot be located

    Examples:
        >>> cache = {"central": [("A", "B", "C", "D")]}
        >>> resolve_stops("Central", "D", "B", lambda line_id: cache.get(line_id, []))
        ['D', 'C', 'B']
    """
    line_id = resolve_line_id(line_name)
    if not line_id:
        return None

    sequences = list(sequences_for(line_id))

    for stops in sequences:
        resolved = resolve_within_sequence(stops, from_name, to_name)
        if resolved is not None:
            return resolved

    for first_position, first in enumerate(sequences):
        for second_position, second in enumerate(sequences):
            if first_position == second_position:
                continue
            stitched = stitch_sequences(first, second, from_name, to_name)
            if stitched is not None:
                return stitched

    return None
