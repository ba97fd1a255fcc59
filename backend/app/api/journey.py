"""API endpoint for planning rail journeys between two named stations."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.core.tfl import get_line_sequence_cache, get_tfl_client
from app.helpers.station_resolution import JourneyNotFoundError
from app.schemas.journey import JourneyPlanResponse
from app.services.journey_service import JourneyService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/journey", tags=["journey"])


def get_journey_service() -> JourneyService:
    """Build a JourneyService on the process-wide TfL client and sequence cache."""
    return JourneyService(get_tfl_client(), get_line_sequence_cache())


@router.get("", response_model=JourneyPlanResponse)
async def plan_journey(
    origin: str | None = Query(None, alias="from", description="Origin station name (e.g. 'Bank')"),
    destination: str | None = Query(None, alias="to", description="Destination station name"),
    date: str | None = Query(None, description="Departure date as yyyyMMdd"),
    time: str | None = Query(None, description="Departure time as HHmm"),
    journey_service: JourneyService = Depends(get_journey_service),
) -> JourneyPlanResponse:
    """
    Plan route options between two stations.

    Each route lists its rail legs with every intermediate stop, plus up to
    three concrete departures sorted by start time.

    Args:
        origin: Origin station name
        destination: Destination station name
        date: Optional departure date, passed to TfL unmodified
        time: Optional departure time, passed to TfL unmodified
        journey_service: Journey planning service

    Returns:
        Routes ordered by number of rail legs, then duration

    Raises:
        HTTPException: 400 if from/to is missing, 404 if no station or journey
            is found, 500 on any other failure
    """
    if not origin or not origin.strip() or not destination or not destination.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Both 'from' and 'to' query parameters are required.",
        )

    try:
        routes = await journey_service.plan_journey(origin.strip(), destination.strip(), date=date, time=time)
    except JourneyNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except Exception as exc:
        logger.error("journey_plan_failed", origin=origin, destination=destination, error=str(exc), exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc

    return JourneyPlanResponse(routes=routes)
