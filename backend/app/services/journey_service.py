"""Service that plans rail journeys between two named stations."""

from __future__ import annotations

import asyncio
from datetime import timedelta
from itertools import islice
from typing import TYPE_CHECKING

import structlog

from app.core.config import settings
from app.core.telemetry import service_span
from app.helpers.leg_enrichment import enrich_leg
from app.helpers.leg_merging import merge_legs
from app.helpers.node_pairs import build_node_pairs
from app.helpers.route_options import (
    build_journey_option,
    build_route_option,
    dedupe_by,
    filter_routes,
    group_by,
    rank_routes,
    raw_route_signature,
)
from app.helpers.station_resolution import (
    NoJourneysFoundError,
    StationNotFoundError,
    is_hub_id,
    rail_child_ids,
)
from app.schemas.journey import JourneyOption, RouteOption
from app.services.line_sequence_cache import LineSequenceCache
from app.services.tfl_client import DEFAULT_SEARCH_MODES, TflApiError, TflClient

if TYPE_CHECKING:
    from pydantic_tfl_api.models import Journey, SearchMatch

logger = structlog.get_logger(__name__)

SERVICE_NAME = "journey-planner"


class JourneyService:
    """
    Orchestrates the journey pipeline.

    Station names are resolved to NaPTAN nodes, every plausible node pair is
    sent to TfL's Journey Planner, and the itineraries that come back are
    deduplicated, grouped by line sequence, enriched with full stop lists,
    merged, ranked and filtered.
    """

    def __init__(self, client: TflClient, cache: LineSequenceCache) -> None:
        """
        Initialize service with its TfL collaborators.

        Args:
            client: TfL API client
            cache: Shared line sequence cache
        """
        self.client = client
        self.cache = cache

    async def plan_journey(
        self,
        origin: str,
        destination: str,
        *,
        date: str | None = None,
        time: str | None = None,
    ) -> list[RouteOption]:
        """
        Plan route options from origin to destination.

        Args:
            origin: Origin station name as typed by the user
            destination: Destination station name as typed by the user
            date: Optional yyyyMMdd departure date, passed to TfL unmodified
            time: Optional HHmm departure time, passed to TfL unmodified

        Returns:
            Route options ordered by number of rail legs, then duration

        Raises:
            StationNotFoundError: If either name has no StopPoint match
            NoJourneysFoundError: If TfL returns nothing usable
        """
        logger.info("journey_plan_started", origin=origin, destination=destination, date=date, time=time)

        with service_span("journey.plan", SERVICE_NAME, origin=origin, destination=destination) as span:
            from_ids, to_ids = await self._resolve_stations(origin, destination)

            pairs = build_node_pairs(from_ids, to_ids)
            logger.info("journey_node_pairs_built", from_ids=from_ids, to_ids=to_ids, pairs=pairs)

            journeys = await self._fetch_journeys(pairs, date=date, time=time)
            unique = dedupe_by(journeys, raw_route_signature)
            logger.info("journeys_fetched", total=len(journeys), unique=len(unique))
            if not unique:
                raise NoJourneysFoundError(origin, destination)

            await self.cache.prefetch(unique)

            routes = rank_routes(self._build_routes(unique, origin, destination))
            kept = filter_routes(routes, destination)
            span.set_attribute("journey.route_count", len(kept))

            logger.info(
                "journey_plan_completed",
                origin=origin,
                destination=destination,
                candidate_routes=len(routes),
                dropped_routes=len(routes) - len(kept),
                route_count=len(kept),
            )
            if not kept:
                raise NoJourneysFoundError(origin, destination)
            return kept

    async def _resolve_stations(self, origin: str, destination: str) -> tuple[list[str], list[str]]:
        """Resolve both station names to node ids, searching and expanding hubs concurrently."""
        from_match, to_match = await asyncio.gather(self._search_station(origin), self._search_station(destination))
        if from_match is None:
            raise StationNotFoundError(origin)
        if to_match is None:
            raise StationNotFoundError(destination)

        from_ids, to_ids = await asyncio.gather(self._expand_node(from_match.id), self._expand_node(to_match.id))
        return from_ids, to_ids

    async def _search_station(self, name: str) -> SearchMatch | None:
        """First StopPoint search match for a name, or None."""
        try:
            result = await self.client.search_stop_points(name, DEFAULT_SEARCH_MODES)
        except TflApiError as e:
            logger.warning("station_search_failed", station_name=name, error=str(e))
            return None

        if not result.matches:
            logger.info("station_search_no_match", station_name=name)
            return None
        match = result.matches[0]
        logger.debug("station_search_matched", station_name=name, match_id=match.id, match_name=match.name)
        return match

    async def _expand_node(self, node_id: str) -> list[str]:
        """
        Expand a hub id to its rail child ids.

        Non-hub ids, failed hub lookups and hubs with no eligible children all
        resolve to [node_id].
        """
        if not is_hub_id(node_id):
            return [node_id]

        try:
            hub = await self.client.get_stop_point(node_id)
        except TflApiError as e:
            logger.warning("hub_expansion_failed", hub_id=node_id, error=str(e))
            return [node_id]

        children = rail_child_ids(hub, DEFAULT_SEARCH_MODES)
        logger.debug("hub_expanded", hub_id=node_id, child_ids=children)
        return children or [node_id]

    async def _fetch_journeys(
        self,
        pairs: list[tuple[str, str]],
        *,
        date: str | None,
        time: str | None,
    ) -> list[Journey]:
        """Query every node pair concurrently; flatten the results in pair order."""

        async def fetch(from_id: str, to_id: str) -> list[Journey]:
            try:
                result = await self.client.get_journeys(from_id, to_id, date=date, time=time)
            except TflApiError as e:
                logger.warning("journey_query_failed", from_id=from_id, to_id=to_id, error=str(e))
                return []
            return list(result.journeys or [])

        results = await asyncio.gather(*(fetch(from_id, to_id) for from_id, to_id in pairs))
        return [journey for journeys in results for journey in journeys]

    def _build_routes(self, journeys: list[Journey], origin: str, destination: str) -> list[RouteOption]:
        """Group itineraries by raw signature and build one route per retained group."""
        groups = group_by(journeys, raw_route_signature)
        max_gap = timedelta(seconds=settings.LEG_MERGE_MAX_GAP_SECONDS)

        routes: list[RouteOption] = []
        with service_span("journey.enrich", SERVICE_NAME, group_count=len(groups)):
            for members in islice(groups.values(), settings.MAX_ROUTE_GROUPS):
                departures = [
                    self._enrich_journey(journey, max_gap) for journey in members[: settings.MAX_DEPARTURES_PER_ROUTE]
                ]
                routes.append(build_route_option(departures, origin, destination))
        return routes

    def _enrich_journey(self, journey: Journey, max_gap: timedelta) -> JourneyOption:
        """Enrich every leg of an itinerary from the cache, then merge split rides."""
        legs = [enrich_leg(leg, self.cache.peek) for leg in journey.legs or []]
        return build_journey_option(journey, merge_legs(legs, max_gap))
