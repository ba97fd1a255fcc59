"""Pydantic schemas for journey planning responses."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class EnrichedLeg(BaseModel):
    """A journey leg with its full, endpoint-correct stop sequence."""

    model_config = ConfigDict(frozen=True)

    mode: str | None = Field(None, description="TfL mode name, e.g. 'tube', 'dlr', 'walking'")
    line_name: str | None = Field(None, description="Cleaned line name, e.g. 'Central', 'Elizabeth'")
    departure_point: str | None = Field(None, description="Station the leg starts at")
    arrival_point: str | None = Field(None, description="Station the leg ends at")
    departure_time: datetime | None = None
    arrival_time: datetime | None = None
    duration: int | None = Field(None, description="Leg duration in minutes")
    instruction: str | None = None
    stops: list[str] = Field(
        default_factory=list,
        description="Ordered stops from departure_point to arrival_point inclusive (empty for walking/bus legs)",
    )


class JourneyOption(BaseModel):
    """One concrete departure of a route."""

    start_date_time: datetime | None = None
    arrival_date_time: datetime | None = None
    total_duration: int | None = Field(None, description="Door-to-door duration in minutes")
    legs: list[EnrichedLeg] = Field(default_factory=list, description="All legs, walking included")


class RouteOption(BaseModel):
    """A group of departures that share the same sequence of lines."""

    mode: str = Field(..., description="Mode of the first rail leg, or 'unknown'")
    line_name: str = Field(..., description="Line of the first rail leg")
    origin: str
    destination: str
    total_duration: int | None = Field(None, description="Duration of the earliest departure in minutes")
    legs: list[EnrichedLeg] = Field(default_factory=list, description="Non-walking legs of the earliest departure")
    departures: list[JourneyOption] = Field(default_factory=list, description="Departures sorted by start time")


class JourneyPlanResponse(BaseModel):
    """Response schema for GET /journey."""

    routes: list[RouteOption]
