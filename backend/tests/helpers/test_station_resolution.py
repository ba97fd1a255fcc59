"""Unit tests for hub expansion helpers and journey lookup errors."""

from app.helpers.station_resolution import (
    JourneyNotFoundError,
    NoJourneysFoundError,
    StationNotFoundError,
    is_hub_id,
    rail_child_ids,
)

from tests.helpers.tfl_payloads import make_stop_point, place_payload, stop_point_payload

ALLOWED = ("tube", "dlr", "elizabeth-line", "overground")


class TestIsHubId:
    def test_hub_prefix(self) -> None:
        assert is_hub_id("HUBSRA")
        assert not is_hub_id("940GZZLUSTD")


class TestRailChildIds:
    """Tests for rail_child_ids()."""

    def test_collects_children_and_grandchildren(self) -> None:
        hub = make_stop_point(
            "HUBSRA",
            "Stratford",
            ["tube", "dlr", "bus"],
            children=[
                stop_point_payload("940GZZLUSTD", "Stratford Underground Station", ["tube"]),
                stop_point_payload(
                    "910GSTFD",
                    "Stratford Rail Station",
                    ["elizabeth-line", "overground", "national-rail"],
                    children=[stop_point_payload("940GZZDLSTD", "Stratford DLR Station", ["dlr"])],
                ),
                stop_point_payload("490000223G", "Stratford Bus Station", ["bus"]),
            ],
        )

        assert rail_child_ids(hub, ALLOWED) == ["940GZZLUSTD", "910GSTFD", "940GZZDLSTD"]

    def test_skips_rail_nodes_without_allowed_modes(self) -> None:
        hub = make_stop_point(
            "HUBXXX",
            "Somewhere",
            [],
            children=[stop_point_payload("910GNATRAIL", "Somewhere Rail Station", ["national-rail"])],
        )

        assert rail_child_ids(hub, ALLOWED) == []

    def test_deduplicates_repeated_children(self) -> None:
        child = stop_point_payload("940GZZLUBNK", "Bank Underground Station", ["tube"])
        hub = make_stop_point(
            "HUBBAN",
            "Bank",
            ["tube"],
            children=[child, stop_point_payload("HUBINNER", "Bank", ["tube"], children=[child])],
        )

        assert rail_child_ids(hub, ALLOWED) == ["940GZZLUBNK"]

    def test_place_children_without_modes_qualify_on_id_prefix(self) -> None:
        hub = make_stop_point(
            "HUBWAT",
            "Waterloo",
            ["tube"],
            children=[
                place_payload("940GZZLUWLO", "Waterloo Underground Station"),
                place_payload("490000254W", "Waterloo Bus Station"),
            ],
        )

        assert rail_child_ids(hub, ALLOWED) == ["940GZZLUWLO"]

    def test_ignores_great_grandchildren(self) -> None:
        hub = make_stop_point(
            "HUBDEEP",
            "Deep",
            [],
            children=[
                stop_point_payload(
                    "GROUP1",
                    "Group",
                    [],
                    children=[
                        stop_point_payload(
                            "GROUP2",
                            "Group",
                            [],
                            children=[stop_point_payload("940GZZLUDEEP", "Deep", ["tube"])],
                        )
                    ],
                )
            ],
        )

        assert rail_child_ids(hub, ALLOWED) == []


class TestErrors:
    def test_station_not_found_is_journey_not_found(self) -> None:
        error = StationNotFoundError("Nowhere")
        assert isinstance(error, JourneyNotFoundError)
        assert error.station_name == "Nowhere"
        assert "Nowhere" in str(error)

    def test_no_journeys_found_message(self) -> None:
        error = NoJourneysFoundError("Bank", "Stratford")
        assert isinstance(error, JourneyNotFoundError)
        assert str(error) == "No journeys found from 'Bank' to 'Stratford'."
