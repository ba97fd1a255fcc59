"""Unit tests for pydantic-tfl-api field accessors."""

from types import SimpleNamespace

from app.helpers.tfl_fields import (
    leg_from_name,
    leg_instruction_summary,
    leg_mode_name,
    leg_path_stop_names,
    leg_route_option_name,
    leg_to_name,
    stop_point_children,
    stop_point_id,
    stop_point_modes,
)

from tests.helpers.tfl_payloads import as_model, leg_payload, make_leg, place_payload, stop_point_payload


class TestStopPointFields:
    def test_naptan_id_preferred_over_id(self) -> None:
        stop = as_model({**stop_point_payload("940GZZLUBNK", "Bank", ["tube"]), "id": "generic"})
        assert stop_point_id(stop) == "940GZZLUBNK"

    def test_place_without_naptan_id_or_modes(self) -> None:
        place = as_model(place_payload("940GZZLUWLO", "Waterloo Underground Station"))

        assert stop_point_id(place) == "940GZZLUWLO"
        assert stop_point_modes(place) is None

    def test_children_default_to_empty(self) -> None:
        assert stop_point_children(SimpleNamespace(id="HUBX", children=None)) == []
        assert stop_point_children(SimpleNamespace(id="HUBX")) == []


class TestLegFields:
    def test_reads_mode_route_option_and_instruction(self) -> None:
        leg = make_leg("tube", "Holborn", "Bank", line="Central", summary="Central line to Bank")

        assert leg_mode_name(leg) == "tube"
        assert leg_route_option_name(leg) == "Central"
        assert leg_instruction_summary(leg) == "Central line to Bank"

    def test_missing_mode_route_options_and_instruction(self) -> None:
        leg = make_leg("walking", "A", "B")
        leg.mode = None
        leg.instruction = None

        assert leg_mode_name(leg) is None
        assert leg_route_option_name(leg) is None
        assert leg_instruction_summary(leg) is None

    def test_path_stop_names_accept_stop_list(self) -> None:
        payload = leg_payload("tube", "Holborn", "Bank", line="Central")
        names = ["Holborn", "Chancery Lane", None, "Bank"]
        payload["path"] = {"stopList": [{"name": name} for name in names]}

        assert leg_path_stop_names(as_model(payload)) == ["Holborn", "Chancery Lane", "Bank"]

    def test_endpoint_names_from_points(self) -> None:
        leg = make_leg("tube", "Holborn Underground Station", "Bank Underground Station", stops=["X", "Y"])

        assert leg_from_name(leg) == "Holborn Underground Station"
        assert leg_to_name(leg) == "Bank Underground Station"

    def test_endpoint_names_fall_back_to_path_stops(self) -> None:
        leg = make_leg("tube", "ignored", "ignored", stops=["Holborn", "Chancery Lane", "Bank"])
        leg.departurePoint = SimpleNamespace(lat=51.5, lon=-0.12)
        leg.arrivalPoint = None

        assert leg_from_name(leg) == "Holborn"
        assert leg_to_name(leg) == "Bank"

    def test_endpoint_names_none_without_points_or_path(self) -> None:
        leg = make_leg("walking", "ignored", "ignored")
        leg.departurePoint = None
        leg.arrivalPoint = None

        assert leg_from_name(leg) is None
        assert leg_to_name(leg) is None
