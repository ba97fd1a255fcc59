"""
Unit tests for stop resolution helpers.

Sequences are passed through a plain dict lookup standing in for
LineSequenceCache.peek, so nothing is fetched.
"""

from collections.abc import Sequence

import pytest
from app.helpers.station_names import same_station
from app.helpers.stop_resolution import (
    StopSequence,
    resolve_stops,
    resolve_within_sequence,
    slice_between,
    stitch_sequences,
)


def lookup(sequences: dict[str, list[StopSequence]]):
    """Build a cache-only sequence lookup from a dict."""
    return lambda line_id: sequences.get(line_id, [])


def is_contiguous_slice(result: Sequence[str], sequence: Sequence[str]) -> bool:
    """True if result appears in sequence, forwards or backwards, as one unbroken run."""
    n = len(result)
    forwards = list(sequence)
    backwards = forwards[::-1]
    return any(
        candidate[i : i + n] == list(result) for candidate in (forwards, backwards) for i in range(len(sequence))
    )


class TestSliceBetween:
    """Tests for slice_between()."""

    def test_forward(self) -> None:
        assert slice_between(["A", "B", "C", "D"], 1, 3) == ["B", "C", "D"]

    def test_reverse(self) -> None:
        assert slice_between(["A", "B", "C", "D"], 3, 1) == ["D", "C", "B"]

    def test_same_index(self) -> None:
        assert slice_between(["A", "B", "C"], 1, 1) == ["B"]


class TestResolveWithinSequence:
    """Tests for resolve_within_sequence()."""

    def test_resolves_with_fuzzy_names(self) -> None:
        stops = ["Bank", "Shadwell", "Limehouse", "Westferry"]
        result = resolve_within_sequence(stops, "Bank DLR Station", "Limehouse DLR Station")
        assert result == ["Bank", "Shadwell", "Limehouse"]

    def test_missing_station_returns_none(self) -> None:
        assert resolve_within_sequence(["Bank", "Shadwell"], "Bank", "Morden") is None


class TestStitchSequences:
    """Tests for stitch_sequences()."""

    def test_joins_at_first_junction_after_origin(self) -> None:
        first = ("X", "Y", "Junction", "P")
        second = ("Q", "Junction", "Z", "W")
        assert stitch_sequences(first, second, "X", "W") == ["X", "Y", "Junction", "Z", "W"]

    def test_junction_listed_once_when_heading_back_along_second(self) -> None:
        first = ("X", "Junction")
        second = ("W", "Z", "Junction")
        assert stitch_sequences(first, second, "X", "W") == ["X", "Junction", "Z", "W"]

    def test_no_shared_stop_returns_none(self) -> None:
        assert stitch_sequences(("X", "Y"), ("Z", "W"), "X", "W") is None

    def test_junction_before_origin_is_ignored(self) -> None:
        first = ("Junction", "X", "Y")
        second = ("Junction", "W")
        assert stitch_sequences(first, second, "X", "W") is None


class TestResolveStops:
    """Tests for resolve_stops()."""

    def test_direct_resolution_reversed(self) -> None:
        """Travelling against sequence order should return the reversed slice."""
        cache = {"central": [("A", "B", "C", "D")]}
        assert resolve_stops("Central", "D", "B", lookup(cache)) == ["D", "C", "B"]

    def test_one_hop_stitch(self) -> None:
        cache = {"northern": [("X", "Y", "Junction", "P"), ("Q", "Junction", "Z", "W")]}
        assert resolve_stops("Northern", "X", "W", lookup(cache)) == ["X", "Y", "Junction", "Z", "W"]

    def test_direct_sequence_preferred_over_stitch(self) -> None:
        cache = {
            "district": [
                ("X", "Y", "Junction", "P"),
                ("Q", "Junction", "Z", "W"),
                ("X", "Short", "W"),
            ]
        }
        assert resolve_stops("District", "X", "W", lookup(cache)) == ["X", "Short", "W"]

    def test_first_matching_sequence_wins(self) -> None:
        cache = {"northern": [("A", "B1", "C"), ("A", "B2", "C")]}
        assert resolve_stops("Northern", "A", "C", lookup(cache)) == ["A", "B1", "C"]

    def test_uses_line_id_for_display_names(self) -> None:
        cache = {"hammersmith-city": [("Paddington", "Edgware Road", "Baker Street")]}
        result = resolve_stops("Hammersmith & City", "Paddington", "Baker Street", lookup(cache))
        assert result == ["Paddington", "Edgware Road", "Baker Street"]

    def test_unknown_line_returns_none(self) -> None:
        assert resolve_stops("Central", "A", "B", lookup({})) is None

    def test_empty_line_name_returns_none(self) -> None:
        assert resolve_stops(None, "A", "B", lookup({"central": [("A", "B")]})) is None

    def test_unlocatable_stations_return_none(self) -> None:
        cache = {"central": [("A", "B", "C")]}
        assert resolve_stops("Central", "A", "Morden", lookup(cache)) is None

    @pytest.mark.parametrize(
        ("from_name", "to_name"),
        [("Ealing Broadway", "Bank"), ("Bank", "Ealing Broadway"), ("Holborn", "Holborn"), ("Bond Street", "Bank")],
    )
    def test_direct_result_is_contiguous_oriented_slice(self, from_name: str, to_name: str) -> None:
        sequence = ("Ealing Broadway", "Notting Hill Gate", "Bond Street", "Oxford Circus", "Holborn", "Bank")
        result = resolve_stops("Central", from_name, to_name, lookup({"central": [sequence]}))

        assert result is not None
        assert is_contiguous_slice(result, sequence)
        assert same_station(result[0], from_name)
        assert same_station(result[-1], to_name)
