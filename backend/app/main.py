"""Main FastAPI application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from opentelemetry import trace
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from app import __version__
from app.api import journey
from app.core.config import settings
from app.core.logging import configure_logging
from app.core.telemetry import get_tracer_provider, shutdown_tracer_provider
from app.core.tfl import reset_tfl_client
from app.middleware import AccessLoggingMiddleware

# Configure logging at module level so Uvicorn startup logs go through structlog pipeline
configure_logging(log_level=settings.LOG_LEVEL)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan - initialize OTEL TracerProvider on startup, drop the TfL client on shutdown."""
    # Initialize TracerProvider in lifespan (after fork) so each worker gets its own
    # BatchSpanProcessor with proper threading
    if settings.OTEL_ENABLED and (provider := get_tracer_provider()):
        trace.set_tracer_provider(provider)
        logger.info("otel_tracer_provider_initialized")

    logger.info("startup_complete", tfl_api_key_configured=settings.TFL_API_KEY is not None)

    yield

    logger.info("shutdown_starting")
    reset_tfl_client()
    if settings.OTEL_ENABLED:
        shutdown_tracer_provider()
    logger.info("shutdown_complete")


app = FastAPI(
    title="Tube Journey Planner API",
    description="Rail journey planning across the Underground, DLR, Elizabeth line and Overground",
    version=__version__,
    lifespan=lifespan,
)

# Instrumentor wraps the ASGI application to create HTTP request spans
# TracerProvider is set later in lifespan (after fork) for fork-safety
if settings.OTEL_ENABLED:
    FastAPIInstrumentor().instrument_app(
        app,
        excluded_urls=",".join(settings.OTEL_EXCLUDED_URLS),
    )
    logger.info("otel_fastapi_instrumented", excluded_urls=settings.OTEL_EXCLUDED_URLS)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Access logging middleware (replaces uvicorn.access logs with structlog)
app.add_middleware(AccessLoggingMiddleware)

app.include_router(journey.router, prefix=settings.API_V1_PREFIX)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": settings.PROJECT_NAME, "version": __version__}


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/ready")
async def readiness_check() -> dict[str, str]:
    """Readiness check endpoint."""
    return {"status": "ready"}
