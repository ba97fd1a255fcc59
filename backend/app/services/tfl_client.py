"""Async facade over the pydantic-tfl-api clients used by the journey planner."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from functools import partial
from typing import TYPE_CHECKING, Any

import structlog
from opentelemetry.trace import SpanKind
from pydantic_tfl_api import JourneyClient, LineClient, StopPointClient
from pydantic_tfl_api.core import ApiError, ResponseModel

from app.core.config import settings
from app.core.telemetry import service_span

if TYPE_CHECKING:
    from pydantic_tfl_api.models import ItineraryResult, RouteSequence, SearchResponse, StopPoint

logger = structlog.get_logger(__name__)

TFL_PEER_SERVICE = "tfl-api"
SEQUENCE_DIRECTIONS = ("outbound", "inbound")
DEFAULT_SEARCH_MODES = ("tube", "dlr", "elizabeth-line", "overground")

# pydantic-tfl-api names each endpoint after all of its path and query parameters
ROUTE_SEQUENCE_OPERATION = "RouteSequenceByPathIdPathDirectionQueryServiceTypesQueryExcludeCrowding"
STOP_POINT_OPERATION = "GetByPathIdsQueryIncludeCrowdingData"
STOP_POINT_SEARCH_OPERATION = (
    "SearchByPathQueryQueryModesQueryFaresOnlyQueryMaxResultsQueryLinesQueryIncludeHubs"
    "QueryTflOperatedNationalRailStationsOnly"
)
JOURNEY_RESULTS_OPERATION = (
    "JourneyResultsByPathFromPathToQueryViaQueryNationalSearchQueryDateQueryTimeQueryTimeIs"
    "QueryJourneyPreferenceQueryModeQueryAccessibilityPreferenceQueryFromNameQueryToNameQueryViaName"
    "QueryMaxTransferMinutesQueryMaxWalkingMinutesQueryWalkingSpeedQueryCyclePreferenceQueryAdjustment"
    "QueryBikeProficiencyQueryAlternativeCyclingQueryAlternativeWalkingQueryApplyHtmlMarkup"
    "QueryUseMultiModalCallQueryWalkingOptimizationQueryTaxiOnlyTripQueryRouteBetweenEntrances"
    "QueryUseRealTimeLiveArrivalsQueryCalcOneDirectionQueryIncludeAlternativeRoutes"
    "QueryOverrideMultiModalScenarioQueryCombineTransferLegs"
)


class TflApiError(Exception):
    """Raised when a TfL API call fails (network, timeout, TfL error response or unusable payload)."""

    def __init__(self, path: str, reason: str, status_code: int | None = None) -> None:
        self.path = path
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"TfL API request to {path} failed: {reason}")


class TflClient:
    """
    Async wrapper over pydantic-tfl-api's Line, StopPoint and Journey clients.

    The library clients are synchronous, so every call runs in the default
    executor and is bounded by a timeout. Each call either returns the
    library's response model or raises TflApiError. Nothing is retried.
    """

    def __init__(
        self,
        line_client: LineClient | None = None,
        stoppoint_client: StopPointClient | None = None,
        journey_client: JourneyClient | None = None,
    ) -> None:
        """
        Initialize the TfL client.

        Args:
            line_client: Preconfigured LineClient (tests pass doubles)
            stoppoint_client: Preconfigured StopPointClient
            journey_client: Preconfigured JourneyClient

        Clients that are not passed are created with TFL_API_KEY.
        """
        self.line_client = line_client or LineClient(api_token=settings.TFL_API_KEY)
        self.stoppoint_client = stoppoint_client or StopPointClient(api_token=settings.TFL_API_KEY)
        self.journey_client = journey_client or JourneyClient(api_token=settings.TFL_API_KEY)

    def _handle_api_error(self, path: str, response: ResponseModel[Any] | ApiError) -> None:
        """
        Raise TflApiError if the library returned an ApiError.

        Raises:
            TflApiError: With TfL's message and HTTP status code
        """
        if isinstance(response, ApiError):
            logger.error("tfl_api_error", path=path, message=response.message, status=response.http_status_code)
            raise TflApiError(
                path, f"HTTP {response.http_status_code}: {response.message}", status_code=response.http_status_code
            )

    async def _call(self, path: str, api_call: Callable[[], Any], *, timeout: float) -> Any:
        """
        Run a synchronous library call in the executor and return its content.

        Args:
            path: TfL path being requested, for errors and logs
            api_call: Zero-argument callable invoking a pydantic-tfl-api endpoint
            timeout: Seconds to wait before giving up

        Raises:
            TflApiError: On timeouts, transport failures, TfL error responses or missing content
        """
        loop = asyncio.get_running_loop()
        try:
            response = await asyncio.wait_for(loop.run_in_executor(None, api_call), timeout=timeout)
        except TimeoutError as e:
            raise TflApiError(path, f"timed out after {timeout}s") from e
        except Exception as e:
            # requests, JSON decoding and model validation failures all surface here
            raise TflApiError(path, f"{type(e).__name__}: {e!s}") from e

        self._handle_api_error(path, response)
        if response.content is None:
            raise TflApiError(path, "empty response content")
        return response.content

    async def search_stop_points(
        self,
        query: str,
        modes: tuple[str, ...] = DEFAULT_SEARCH_MODES,
    ) -> SearchResponse:
        """
        Search stop points by free-text name.

        Args:
            query: Station name as typed by the user
            modes: TfL modes to restrict the search to

        Returns:
            Search response; matches are ordered by TfL relevance
        """
        with service_span("tfl.stop_point_search", TFL_PEER_SERVICE, kind=SpanKind.CLIENT, query=query) as span:
            api_call = partial(
                getattr(self.stoppoint_client, STOP_POINT_SEARCH_OPERATION),
                query,
                modes=",".join(modes),
            )
            result = await self._call(f"/StopPoint/Search/{query}", api_call, timeout=settings.TFL_REQUEST_TIMEOUT)
            span.set_attribute("tfl.match_count", len(result.matches or []))
            return result

    async def get_stop_point(self, stop_point_id: str) -> StopPoint:
        """Fetch one stop point (or hub) with its nested children."""
        path = f"/StopPoint/{stop_point_id}"
        with service_span("tfl.stop_point", TFL_PEER_SERVICE, kind=SpanKind.CLIENT, stop_point_id=stop_point_id):
            api_call = partial(
                getattr(self.stoppoint_client, STOP_POINT_OPERATION),
                ids=stop_point_id,
                includeCrowdingData=False,
            )
            # Content is a StopPointArray (RootModel), access via .root
            stop_points = (await self._call(path, api_call, timeout=settings.TFL_REQUEST_TIMEOUT)).root
            if not stop_points:
                raise TflApiError(path, "no stop point returned")
            return stop_points[0]

    async def get_route_sequence(self, line_id: str, direction: str) -> RouteSequence:
        """
        Fetch the ordered stop sequences of a line in one direction.

        Args:
            line_id: TfL line id (e.g. "central", "hammersmith-city")
            direction: "outbound" or "inbound"
        """
        with service_span(
            "tfl.route_sequence", TFL_PEER_SERVICE, kind=SpanKind.CLIENT, line_id=line_id, direction=direction
        ) as span:
            api_call = partial(
                getattr(self.line_client, ROUTE_SEQUENCE_OPERATION),
                line_id,
                direction,
                "",  # serviceTypes (empty for all)
                True,  # excludeCrowding
            )
            result = await self._call(
                f"/Line/{line_id}/Route/Sequence/{direction}", api_call, timeout=settings.TFL_SEQUENCE_TIMEOUT
            )
            span.set_attribute("tfl.sequence_count", len(result.stopPointSequences or []))
            return result

    async def get_journeys(
        self,
        from_id: str,
        to_id: str,
        *,
        date: str | None = None,
        time: str | None = None,
    ) -> ItineraryResult:
        """
        Ask the Journey Planner for itineraries between two nodes.

        Args:
            from_id: Origin NaPTAN id
            to_id: Destination NaPTAN id
            date: Optional yyyyMMdd date, passed through unmodified
            time: Optional HHmm time, passed through unmodified
        """
        with service_span(
            "tfl.journey_results", TFL_PEER_SERVICE, kind=SpanKind.CLIENT, from_id=from_id, to_id=to_id
        ) as span:
            api_call = partial(
                getattr(self.journey_client, JOURNEY_RESULTS_OPERATION),
                from_id,
                to_id,
                nationalSearch=False,
                date=date or None,
                time=time or None,
            )
            result = await self._call(
                f"/Journey/JourneyResults/{from_id}/to/{to_id}", api_call, timeout=settings.TFL_REQUEST_TIMEOUT
            )
            journeys = getattr(result, "journeys", None)
            if journeys is None:
                # A 300 disambiguation result parses without journeys
                raise TflApiError(f"/Journey/JourneyResults/{from_id}/to/{to_id}", "no itinerary in response")
            span.set_attribute("tfl.journey_count", len(journeys))
            return result
