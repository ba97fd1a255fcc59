"""Process-lifetime cache of TfL line stop sequences."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import TYPE_CHECKING

import structlog

from app.core.telemetry import service_span
from app.helpers.leg_enrichment import is_enrichable_mode, leg_line_name
from app.helpers.line_ids import resolve_line_id
from app.helpers.stop_resolution import MIN_RESOLVED_STOPS, StopSequence
from app.helpers.tfl_fields import leg_mode_name
from app.services.tfl_client import SEQUENCE_DIRECTIONS, TflApiError, TflClient

if TYPE_CHECKING:
    from pydantic_tfl_api.models import Journey, RouteSequence

logger = structlog.get_logger(__name__)


def extract_stop_sequences(route_sequences: Iterable[RouteSequence]) -> list[StopSequence]:
    """Flatten route-sequence responses into stop-name sequences with at least two stops."""
    return [
        names
        for route_sequence in route_sequences
        for sequence in route_sequence.stopPointSequences or []
        if len(names := tuple(stop.name for stop in sequence.stopPoint or [] if stop.name)) >= MIN_RESOLVED_STOPS
    ]


class LineSequenceCache:
    """
    Write-once cache of stop sequences per TfL line id.

    Entries are never invalidated. A failed fetch is cached as an empty list so a
    broken line id costs one pair of requests per process, not one per journey.

    Concurrent first requests for the same line share a single in-flight future,
    so the outbound/inbound pair is fetched once. All access happens on the event
    loop thread, which is why no lock is needed.
    """

    def __init__(self, client: TflClient) -> None:
        """
        Initialize the cache.

        Args:
            client: TfL client used to fetch route sequences on a miss
        """
        self._client = client
        self._sequences: dict[str, list[StopSequence]] = {}
        self._pending: dict[str, asyncio.Future[list[StopSequence]]] = {}

    def __contains__(self, line_id: object) -> bool:
        return line_id in self._sequences

    def __len__(self) -> int:
        return len(self._sequences)

    def peek(self, line_id: str) -> list[StopSequence]:
        """Cached sequences for a line, or an empty list. Never fetches."""
        return self._sequences.get(line_id, [])

    async def get_sequences(self, line_id: str) -> list[StopSequence]:
        """
        Get the stop sequences of a line, fetching both directions on a miss.

        Args:
            line_id: TfL line id

        Returns:
            Outbound sequences followed by inbound sequences (every branch with
            two or more stops), or an empty list if the fetch failed
        """
        if line_id in self._sequences:
            logger.debug("line_sequences_cache_hit", line_id=line_id)
            return self._sequences[line_id]

        pending = self._pending.get(line_id)
        if pending is None:
            pending = asyncio.ensure_future(self._load(line_id))
            self._pending[line_id] = pending
            pending.add_done_callback(lambda _: self._pending.pop(line_id, None))
        else:
            logger.debug("line_sequences_fetch_joined", line_id=line_id)

        # Shield so a cancelled caller doesn't cancel the fetch other callers are awaiting
        return await asyncio.shield(pending)

    async def _load(self, line_id: str) -> list[StopSequence]:
        logger.info("fetching_line_sequences_from_tfl_api", line_id=line_id)
        try:
            responses = await asyncio.gather(
                *(self._client.get_route_sequence(line_id, direction) for direction in SEQUENCE_DIRECTIONS)
            )
        except TflApiError as e:
            logger.warning("line_sequences_fetch_failed", line_id=line_id, error=str(e))
            sequences: list[StopSequence] = []
        else:
            sequences = extract_stop_sequences(responses)
            logger.info("line_sequences_cached", line_id=line_id, sequence_count=len(sequences))

        self._sequences[line_id] = sequences
        return sequences

    async def prefetch(self, journeys: Iterable[Journey]) -> set[str]:
        """
        Warm the cache for every line used by the rail legs of the given journeys.

        Walking, bus, coach, tram, cable-car and cycle legs are skipped. All
        missing lines are fetched concurrently so later stop resolution is
        cache-only.

        Returns:
            The line ids touched by the journeys
        """
        line_ids = {
            line_id
            for journey in journeys
            for leg in journey.legs or []
            if is_enrichable_mode(leg_mode_name(leg)) and (line_id := resolve_line_id(leg_line_name(leg)))
        }
        missing = sorted(line_id for line_id in line_ids if line_id not in self._sequences)

        with service_span("journey.prefetch_sequences", "journey-planner", line_count=len(missing)):
            await asyncio.gather(*(self.get_sequences(line_id) for line_id in missing))

        logger.info("line_sequences_prefetched", line_ids=sorted(line_ids), fetched=missing)
        return line_ids
