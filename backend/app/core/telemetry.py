"""OpenTelemetry distributed tracing configuration."""

import threading
from collections.abc import Generator
from contextlib import contextmanager
from typing import TYPE_CHECKING

import structlog
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import SpanKind, Status, StatusCode

from app import __version__
from app.core.config import require_config, settings

if TYPE_CHECKING:
    from opentelemetry.trace.span import Span

logger = structlog.get_logger(__name__)

# Module-level globals for lazy initialization (fork-safety)
_tracer_provider: TracerProvider | None = None
_tracer_provider_lock = threading.Lock()


def get_tracer_provider() -> TracerProvider | None:
    """
    Get or create TracerProvider (lazy initialization for fork-safety).

    Each forked uvicorn worker creates its own provider the first time this is
    called, so the BatchSpanProcessor thread belongs to the right process.

    Returns:
        TracerProvider if OTEL is enabled, None otherwise
    """
    if not settings.OTEL_ENABLED:
        return None

    global _tracer_provider  # noqa: PLW0603
    if _tracer_provider is None:
        with _tracer_provider_lock:
            if _tracer_provider is None:  # Double-checked locking
                _tracer_provider = _create_tracer_provider()
    return _tracer_provider


def _create_tracer_provider() -> TracerProvider:
    """
    Build the TracerProvider for this process.

    Outside DEBUG an OTLP traces endpoint is mandatory. Without one (DEBUG
    only) spans are still recorded for log correlation but never exported.

    Raises:
        ValueError: If OTEL_EXPORTER_OTLP_TRACES_ENDPOINT is missing in production
    """
    if not settings.DEBUG:
        require_config("OTEL_EXPORTER_OTLP_TRACES_ENDPOINT")

    provider = TracerProvider(
        resource=Resource(
            attributes={
                "service.name": settings.OTEL_SERVICE_NAME,
                "service.version": __version__,
                "deployment.environment": settings.OTEL_ENVIRONMENT,
            }
        )
    )

    endpoint = settings.OTEL_EXPORTER_OTLP_TRACES_ENDPOINT
    if not endpoint:
        logger.warning("otel_no_traces_endpoint_configured", message="traces will not be exported")
        return provider

    exporter = OTLPSpanExporter(endpoint=endpoint, headers=_parse_otlp_headers(settings.OTEL_EXPORTER_OTLP_HEADERS))
    provider.add_span_processor(BatchSpanProcessor(exporter))
    logger.info(
        "otel_tracer_provider_created",
        endpoint=endpoint,
        service_name=settings.OTEL_SERVICE_NAME,
        environment=settings.OTEL_ENVIRONMENT,
    )
    return provider


def _parse_otlp_headers(headers_str: str | None) -> dict[str, str]:
    """
    Parse OTLP headers from comma-separated key=value pairs.

    Values may contain "=" (only the first one splits). Pairs without "=" are
    skipped with a warning.

    Example:
        >>> _parse_otlp_headers("Authorization=Bearer token123,X-Custom=value")
        {'Authorization': 'Bearer token123', 'X-Custom': 'value'}
    """
    headers: dict[str, str] = {}
    for pair in filter(None, (part.strip() for part in (headers_str or "").split(","))):
        key, sep, value = pair.partition("=")
        if not sep:
            logger.warning("otel_malformed_header", pair=pair)
            continue
        headers[key.strip()] = value.strip()
    return headers


def shutdown_tracer_provider() -> None:
    """Flush pending spans and release the provider. Safe to call when no provider exists."""
    if _tracer_provider is not None:
        _tracer_provider.shutdown()
        logger.info("otel_tracer_provider_shutdown")


# OpenTelemetry attribute values can be primitives or lists of primitives
AttributeValue = str | int | float | bool | list[str] | list[int] | list[float] | list[bool]


@contextmanager
def service_span(
    name: str,
    service: str,
    kind: SpanKind = SpanKind.INTERNAL,
    **attributes: AttributeValue,
) -> Generator["Span"]:
    """Context manager for service operation spans with explicit status.

    Sets StatusCode.OK on successful completion; on failure the SDK records the
    exception and sets StatusCode.ERROR.

    The tracer is acquired at call time so it uses the TracerProvider set
    during application startup.

    Args:
        name: Span name (e.g., "tfl.journey_results", "journey.enrich")
        service: Service name for peer.service attribute (e.g., "tfl-api")
        kind: Span kind (default INTERNAL, use CLIENT for external calls)
        **attributes: Additional span attributes

    Example:
        with service_span("tfl.route_sequence", "tfl-api", kind=SpanKind.CLIENT, line_id=line_id) as span:
            sequence = await self._call(path, api_call, timeout=settings.TFL_SEQUENCE_TIMEOUT)
            span.set_attribute("tfl.sequence_count", len(sequence.stopPointSequences or []))
    """
    tracer = trace.get_tracer(__name__)
    span_attributes = {
        "peer.service": service,
        **attributes,
    }
    with tracer.start_as_current_span(
        name,
        kind=kind,
        attributes=span_attributes,
    ) as span:
        yield span
        span.set_status(Status(StatusCode.OK))
