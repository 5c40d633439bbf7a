"""Last-resort error handling for the API.

Service errors that a route did not translate itself are mapped to their HTTP
status here. Anything else is logged with PII redaction and becomes a 500.
"""

import logging
from typing import Callable, Dict, Type

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from celengan.config import settings
from celengan.services.error_logging_service import error_logging_service
from celengan.services.errors import (
    AuthenticationError,
    NotFoundError,
    ServiceError,
    ValidationError,
)

logger = logging.getLogger(__name__)

SERVICE_ERROR_STATUS: Dict[Type[ServiceError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    AuthenticationError: status.HTTP_401_UNAUTHORIZED,
}


def status_for_service_error(exc: ServiceError) -> int:
    for error_type, code in SERVICE_ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return code
    return status.HTTP_400_BAD_REQUEST


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)

        except ServiceError as exc:
            code = status_for_service_error(exc)
            logger.warning(
                "Untranslated %s on %s %s -> %s",
                type(exc).__name__,
                request.method,
                request.url,
                code,
            )
            return JSONResponse(status_code=code, content={"detail": str(exc)})

        except Exception as exc:
            error_logging_service.log_error(
                logger=logger,
                error=exc,
                context={
                    "method": request.method,
                    "url": str(request.url),
                    "request_id": getattr(request.state, "request_id", None),
                },
                user_id=getattr(request.state, "user_id", None),
            )

            if settings.DEBUG:
                body = {"error": str(exc), "type": type(exc).__name__}
            else:
                body = {"error": "Internal server error"}
            body["detail"] = "Something went wrong while recording your finances. Please try again."

            return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body)
