"""Request logging and user context middleware."""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from jose import JWTError
from starlette.middleware.base import BaseHTTPMiddleware

from celengan.core.logging_config import bind_request_context, clear_request_context, get_logger
from celengan.core.security import decode_token
from celengan.utils.logging_utils import redact_email, redact_ip

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class UserContextMiddleware(BaseHTTPMiddleware):
    """
    Copy user id and email from a bearer token into request state for logging.

    The token is not trusted here; ``get_current_user`` does the real check.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        auth_header = request.headers.get("Authorization", "")

        if auth_header.startswith("Bearer "):
            try:
                claims = decode_token(auth_header[len("Bearer "):])
            except JWTError:
                claims = {}

            if claims.get("sub"):
                request.state.user_id = claims["sub"]
            if claims.get("email"):
                request.state.user_email = claims["email"]

        return await call_next(request)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    One event when a request starts and one when it ends.

    A fresh request id is bound into the structlog context for the duration
    of the request and echoed back in the ``X-Request-ID`` header.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        started = time.perf_counter()

        clear_request_context()
        bind_request_context(
            request_id=request_id,
            user_id=getattr(request.state, "user_id", None),
        )

        user = redact_email(getattr(request.state, "user_email", None))
        logger.info(
            "request_started",
            method=request.method,
            path=request.url.path,
            user=user,
            ip=redact_ip(request.client.host if request.client else "unknown"),
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "request_failed",
                method=request.method,
                path=request.url.path,
                duration_ms=int((time.perf_counter() - started) * 1000),
                error=type(exc).__name__,
            )
            clear_request_context()
            raise

        logger.info(
            "request_finished",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=int((time.perf_counter() - started) * 1000),
            user=user,
        )
        clear_request_context()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
