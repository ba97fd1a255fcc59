"""Pytest configuration and fixtures."""

import os

# Set DEBUG=true for all tests BEFORE any app imports
# This must be done before app.core.config loads settings
os.environ["DEBUG"] = "true"
os.environ.pop("OTEL_EXPORTER_OTLP_TRACES_ENDPOINT", None)
os.environ.pop("SECRET_TFL_API_KEY", None)

from collections.abc import AsyncGenerator, Generator
from unittest.mock import AsyncMock

import pytest
from app.core import tfl
from app.main import app
from app.services.line_sequence_cache import LineSequenceCache
from app.services.tfl_client import TflClient
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

pytest_plugins = ["tests.fixtures.otel"]


@pytest.fixture
def client() -> Generator[TestClient]:
    """
    FastAPI synchronous test client for making HTTP requests.

    Yields:
        Synchronous test client with app context
    """
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client() -> AsyncGenerator[AsyncClient]:
    """
    FastAPI asynchronous HTTP client for async endpoint testing.

    Yields:
        Async HTTP client with ASGI transport
    """
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def mock_tfl_client() -> AsyncMock:
    """TflClient double whose endpoint methods are AsyncMocks."""
    return AsyncMock(spec=TflClient)


@pytest.fixture
def sequence_cache(mock_tfl_client: AsyncMock) -> LineSequenceCache:
    """Empty line sequence cache backed by the mock TfL client."""
    return LineSequenceCache(mock_tfl_client)


@pytest.fixture(autouse=True)
def reset_tfl_singletons() -> Generator[None]:
    """Drop the shared TfL client and cache between tests."""
    tfl._tfl_client = None  # type: ignore[attr-defined]
    tfl._line_sequence_cache = None  # type: ignore[attr-defined]
    yield
    tfl._tfl_client = None  # type: ignore[attr-defined]
    tfl._line_sequence_cache = None  # type: ignore[attr-defined]
