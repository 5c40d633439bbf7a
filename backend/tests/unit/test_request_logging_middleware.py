"""Unit tests for request logging and user context middleware."""

from types import SimpleNamespace
from unittest.mock import Mock, patch

import pytest
import structlog
from fastapi import Request, Response
from starlette.datastructures import Headers

from celengan.core.security import create_access_token
from celengan.middleware.request_logging import RequestLoggingMiddleware, UserContextMiddleware


@pytest.fixture
def mock_request():
    request = Mock(spec=Request)
    request.url = Mock()
    request.url.path = "/api/v1/dashboard/"
    request.method = "GET"
    request.client = Mock()
    request.client.host = "192.168.1.100"
    request.headers = Headers({})
    request.state = SimpleNamespace()
    return request


@pytest.fixture
def mock_call_next():
    async def call_next(request):
        response = Mock(spec=Response)
        response.status_code = 200
        response.headers = {}
        return response

    return call_next


@pytest.mark.unit
class TestRequestLoggingMiddleware:
    """Request start/finish logging."""

    @pytest.fixture
    def middleware(self):
        return RequestLoggingMiddleware(Mock())

    @pytest.mark.asyncio
    async def test_sets_request_id_header(self, middleware, mock_request, mock_call_next):
        response = await middleware.dispatch(mock_request, mock_call_next)

        assert response.headers["X-Request-ID"] == mock_request.state.request_id

    @pytest.mark.asyncio
    async def test_logs_redacted_user_and_ip(self, middleware, mock_request, mock_call_next):
        mock_request.state.user_email = "budi@example.com"

        with patch("celengan.middleware.request_logging.logger") as mock_logger:
            await middleware.dispatch(mock_request, mock_call_next)

        started, finished = mock_logger.info.call_args_list
        assert started.args == ("request_started",)
        assert started.kwargs["user"] == "b***@example.com"
        assert started.kwargs["ip"] == "192.168.1.***"
        assert finished.args == ("request_finished",)
        assert finished.kwargs["status"] == 200
        assert "budi@example.com" not in str(mock_logger.info.call_args_list)

    @pytest.mark.asyncio
    async def test_logs_and_reraises_failures(self, middleware, mock_request):
        async def failing_call_next(request):
            raise RuntimeError("boom")

        with patch("celengan.middleware.request_logging.logger") as mock_logger:
            with pytest.raises(RuntimeError):
                await middleware.dispatch(mock_request, failing_call_next)

        assert mock_logger.error.call_args.args == ("request_failed",)
        assert mock_logger.error.call_args.kwargs["error"] == "RuntimeError"

    @pytest.mark.asyncio
    async def test_binds_request_id_for_downstream_events(self, middleware, mock_request):
        seen = {}

        async def call_next(request):
            seen.update(structlog.contextvars.get_contextvars())
            response = Mock(spec=Response)
            response.status_code = 204
            response.headers = {}
            return response

        mock_request.state.user_id = "user-9"
        await middleware.dispatch(mock_request, call_next)

        assert seen["request_id"] == mock_request.state.request_id
        assert seen["user_id"] == "user-9"
        assert structlog.contextvars.get_contextvars() == {}


@pytest.mark.unit
class TestUserContextMiddleware:
    """Token claims copied into request state."""

    @pytest.fixture
    def middleware(self):
        return UserContextMiddleware(Mock())

    @pytest.mark.asyncio
    async def test_copies_claims_from_valid_token(self, middleware, mock_request, mock_call_next):
        token = create_access_token(data={"sub": "user-1", "email": "budi@example.com"})
        mock_request.headers = Headers({"Authorization": f"Bearer {token}"})

        await middleware.dispatch(mock_request, mock_call_next)

        assert mock_request.state.user_id == "user-1"
        assert mock_request.state.user_email == "budi@example.com"

    @pytest.mark.asyncio
    async def test_ignores_invalid_token(self, middleware, mock_request, mock_call_next):
        mock_request.headers = Headers({"Authorization": "Bearer not-a-jwt"})

        response = await middleware.dispatch(mock_request, mock_call_next)

        assert response.status_code == 200
        assert not hasattr(mock_request.state, "user_id")

    @pytest.mark.asyncio
    async def test_no_header(self, middleware, mock_request, mock_call_next):
        await middleware.dispatch(mock_request, mock_call_next)
        assert not hasattr(mock_request.state, "user_email")
