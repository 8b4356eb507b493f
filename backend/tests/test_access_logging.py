"""Tests for access logging middleware."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from httpx import AsyncClient
from starlette.requests import Request
from starlette.responses import Response
from subway.middleware.access_logging import AccessLoggingMiddleware, route_template


class TestAccessLoggingMiddleware:
    """Tests for AccessLoggingMiddleware."""

    @pytest.fixture
    def middleware(self) -> AccessLoggingMiddleware:
        """Create middleware instance."""
        return AccessLoggingMiddleware(MagicMock())

    @pytest.fixture
    def mock_request(self) -> MagicMock:
        """Create mock request."""
        request = MagicMock(spec=Request)
        request.method = "POST"
        request.url.path = "/api/v1/lines"
        request.client.host = "127.0.0.1"
        request.headers = {}
        request.scope = {}
        return request

    @pytest.mark.asyncio
    async def test_logs_request_with_structlog(
        self, middleware: AccessLoggingMiddleware, mock_request: MagicMock
    ) -> None:
        """Test that one http_request event is logged per request."""
        response = Response(status_code=201)
        call_next = AsyncMock(return_value=response)

        with patch("subway.middleware.access_logging.logger") as mock_logger:
            result = await middleware.dispatch(mock_request, call_next)

        assert result is response
        mock_logger.info.assert_called_once()
        args, kwargs = mock_logger.info.call_args
        assert args[0] == "http_request"
        assert kwargs["method"] == "POST"
        assert kwargs["path"] == "/api/v1/lines"
        assert kwargs["status_code"] == 201
        assert kwargs["duration_ms"] >= 0
        assert kwargs["client_ip"] == "127.0.0.1"
        assert "forwarded_for" not in kwargs
        assert "route" not in kwargs

    @pytest.mark.asyncio
    async def test_extracts_first_forwarded_for_hop(
        self, middleware: AccessLoggingMiddleware, mock_request: MagicMock
    ) -> None:
        """Test that the first X-Forwarded-For address is logged."""
        mock_request.headers = {"x-forwarded-for": "203.0.113.195, 70.41.3.18"}
        call_next = AsyncMock(return_value=Response(status_code=200))

        with patch("subway.middleware.access_logging.logger") as mock_logger:
            await middleware.dispatch(mock_request, call_next)

        assert mock_logger.info.call_args[1]["forwarded_for"] == "203.0.113.195"

    @pytest.mark.asyncio
    async def test_unknown_client(self, middleware: AccessLoggingMiddleware, mock_request: MagicMock) -> None:
        """Test that a missing client address is logged as unknown."""
        mock_request.client = None
        call_next = AsyncMock(return_value=Response(status_code=200))

        with patch("subway.middleware.access_logging.logger") as mock_logger:
            await middleware.dispatch(mock_request, call_next)

        assert mock_logger.info.call_args[1]["client_ip"] == "unknown"

    @pytest.mark.asyncio
    async def test_logs_domain_error_status(self, async_client: AsyncClient) -> None:
        """Test that mapped domain errors are logged with their HTTP status."""
        with patch("subway.middleware.access_logging.logger") as mock_logger:
            response = await async_client.get("/api/v1/lines/999")

        assert response.status_code == 404
        kwargs = mock_logger.info.call_args[1]
        assert kwargs["status_code"] == 404
        assert kwargs["path"] == "/api/v1/lines/999"
        assert kwargs["route"] == "/api/v1/lines/{line_id}"


class TestRouteTemplate:
    """Tests for route_template."""

    @staticmethod
    def _request(path: str, route_path: str | None) -> MagicMock:
        request = MagicMock(spec=Request)
        request.url.path = path
        request.scope = {} if route_path is None else {"route": SimpleNamespace(path=route_path)}
        return request

    @pytest.mark.parametrize(
        ("path", "route_path", "expected"),
        [
            ("/api/v1/lines/999", "/lines/{line_id}", "/api/v1/lines/{line_id}"),
            ("/api/v1/lines/999", "/api/v1/lines/{line_id}", "/api/v1/lines/{line_id}"),
            ("/api/v1/lines/3/sections", "/lines/{line_id}/sections", "/api/v1/lines/{line_id}/sections"),
            ("/api/v1/stations", "/stations", "/api/v1/stations"),
            ("/health", "/health", "/health"),
            ("/", "/", "/"),
        ],
    )
    def test_template_includes_router_prefix(self, path: str, route_path: str, expected: str) -> None:
        """Test that the prefix is restored whether or not the route reports it."""
        assert route_template(self._request(path, route_path)) == expected

    def test_no_matched_route(self) -> None:
        """Test that unmatched requests have no template."""
        assert route_template(self._request("/nowhere", None)) is None
