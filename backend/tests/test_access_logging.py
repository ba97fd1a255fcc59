"""Tests for access logging middleware."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import structlog
from app.middleware.access_logging import REQUEST_ID_HEADER, AccessLoggingMiddleware
from starlette.requests import Request
from starlette.responses import Response


class TestAccessLoggingMiddleware:
    """Tests for AccessLoggingMiddleware."""

    @pytest.fixture
    def middleware(self) -> AccessLoggingMiddleware:
        """Create middleware instance."""
        app = MagicMock()
        return AccessLoggingMiddleware(app)

    @pytest.fixture
    def mock_request(self) -> MagicMock:
        """Create mock request."""
        request = MagicMock(spec=Request)
        request.method = "GET"
        request.url.path = "/api/v1/journey"
        request.url.query = ""
        request.client.host = "127.0.0.1"
        request.headers = {}
        return request

    @pytest.mark.asyncio
    async def test_logs_request_with_structlog(
        self, middleware: AccessLoggingMiddleware, mock_request: MagicMock
    ) -> None:
        """Test that middleware logs requests using structlog."""
        response = Response(status_code=200)
        call_next = AsyncMock(return_value=response)

        with patch("app.middleware.access_logging.logger") as mock_logger:
            result = await middleware.dispatch(mock_request, call_next)

            assert result == response
            mock_logger.info.assert_called_once()
            call_args = mock_logger.info.call_args
            assert call_args[0][0] == "http_request"
            assert call_args[1]["method"] == "GET"
            assert call_args[1]["path"] == "/api/v1/journey"
            assert call_args[1]["status_code"] == 200
            assert "duration_ms" in call_args[1]
            assert call_args[1]["client_ip"] == "127.0.0.1"
            assert "query" not in call_args[1]

    @pytest.mark.asyncio
    async def test_logs_query_string(self, middleware: AccessLoggingMiddleware, mock_request: MagicMock) -> None:
        mock_request.url.query = "from=Bank&to=Stratford"
        call_next = AsyncMock(return_value=Response(status_code=200))

        with patch("app.middleware.access_logging.logger") as mock_logger:
            await middleware.dispatch(mock_request, call_next)

            assert mock_logger.info.call_args[1]["query"] == "from=Bank&to=Stratford"

    @pytest.mark.asyncio
    async def test_records_first_forwarded_for_address(
        self, middleware: AccessLoggingMiddleware, mock_request: MagicMock
    ) -> None:
        """Test that middleware records the first X-Forwarded-For hop."""
        mock_request.headers = {"x-forwarded-for": "203.0.113.195, 70.41.3.18"}
        call_next = AsyncMock(return_value=Response(status_code=200))

        with patch("app.middleware.access_logging.logger") as mock_logger:
            await middleware.dispatch(mock_request, call_next)

            call_args = mock_logger.info.call_args
            assert call_args[1]["forwarded_for"] == "203.0.113.195"
            assert call_args[1]["client_ip"] == "127.0.0.1"

    @pytest.mark.asyncio
    async def test_handles_missing_client(self, middleware: AccessLoggingMiddleware, mock_request: MagicMock) -> None:
        """Test that middleware handles missing client gracefully."""
        mock_request.client = None
        call_next = AsyncMock(return_value=Response(status_code=200))

        with patch("app.middleware.access_logging.logger") as mock_logger:
            await middleware.dispatch(mock_request, call_next)

            assert mock_logger.info.call_args[1]["client_ip"] == "unknown"

    @pytest.mark.asyncio
    async def test_measures_duration(self, middleware: AccessLoggingMiddleware, mock_request: MagicMock) -> None:
        """Test that middleware measures request duration."""
        response = Response(status_code=200)

        async def slow_handler(request: Request) -> Response:
            await asyncio.sleep(0.01)
            return response

        with patch("app.middleware.access_logging.logger") as mock_logger:
            await middleware.dispatch(mock_request, slow_handler)

            assert mock_logger.info.call_args[1]["duration_ms"] >= 10


class TestRequestId:
    """Request id propagation through contextvars and headers."""

    @pytest.fixture
    def mock_request(self) -> MagicMock:
        request = MagicMock(spec=Request)
        request.method = "GET"
        request.url.path = "/api/v1/journey"
        request.url.query = ""
        request.client.host = "127.0.0.1"
        request.headers = {}
        return request

    @pytest.mark.asyncio
    async def test_incoming_request_id_is_bound_and_echoed(self, mock_request: MagicMock) -> None:
        mock_request.headers = {REQUEST_ID_HEADER: "abc-123"}
        seen: dict[str, object] = {}

        async def handler(request: Request) -> Response:
            seen.update(structlog.contextvars.get_contextvars())
            return Response(status_code=200)

        with patch("app.middleware.access_logging.logger"):
            response = await AccessLoggingMiddleware(MagicMock()).dispatch(mock_request, handler)

        assert seen["request_id"] == "abc-123"
        assert response.headers[REQUEST_ID_HEADER] == "abc-123"
        assert structlog.contextvars.get_contextvars() == {}

    @pytest.mark.asyncio
    async def test_generates_request_id_when_absent(self, mock_request: MagicMock) -> None:
        call_next = AsyncMock(return_value=Response(status_code=200))

        with patch("app.middleware.access_logging.logger"):
            response = await AccessLoggingMiddleware(MagicMock()).dispatch(mock_request, call_next)

        assert len(response.headers[REQUEST_ID_HEADER]) == 32

    @pytest.mark.asyncio
    async def test_contextvars_cleared_when_handler_raises(self, mock_request: MagicMock) -> None:
        call_next = AsyncMock(side_effect=RuntimeError("boom"))

        with patch("app.middleware.access_logging.logger"), pytest.raises(RuntimeError, match="boom"):
            await AccessLoggingMiddleware(MagicMock()).dispatch(mock_request, call_next)

        assert structlog.contextvars.get_contextvars() == {}
