"""Celengan API application."""

import logging
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Any, Dict, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from celengan.api.v1 import (
    auth,
    categories,
    dashboard,
    navigation,
    profile,
    reports,
    savings_targets,
    transactions,
)
from celengan.config import settings
from celengan.core.database import close_db, init_db
from celengan.core.logging_config import setup_logging
from celengan.middleware.error_handler import ErrorHandlerMiddleware
from celengan.middleware.request_logging import RequestLoggingMiddleware, UserContextMiddleware

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

# (router module, path, OpenAPI tag)
ROUTERS = [
    (auth, "/auth", "Authentication"),
    (profile, "/profile", "Profile"),
    (categories, "/categories", "Categories"),
    (transactions, "/transactions", "Transactions"),
    (savings_targets, "/savings-targets", "Savings Targets"),
    (dashboard, "/dashboard", "Dashboard"),
    (reports, "/reports", "Reports"),
    (navigation, "/navigation", "Navigation"),
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info(f"Starting {settings.APP_NAME} API ({settings.ENVIRONMENT})")

    await init_db()

    yield

    logger.info(f"Shutting down {settings.APP_NAME} API")
    await close_db()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
)

# Starlette runs the last added middleware first. Outermost to innermost:
# user context, request logging, error handler, CORS.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(ErrorHandlerMiddleware)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(UserContextMiddleware)


def _json_safe(value: Any) -> Any:
    """Make pydantic error contexts (Decimals, exceptions) JSON serializable."""
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, Exception):
        return str(value)
    return value


def field_errors(exc: RequestValidationError) -> List[Dict[str, Any]]:
    """One entry per invalid field: the field name, a message and pydantic's loc."""
    return [
        {
            "field": str(error["loc"][-1]) if error.get("loc") else None,
            "message": error.get("msg", "Invalid value"),
            "loc": _json_safe(list(error.get("loc", ()))),
            "type": error.get("type"),
        }
        for error in exc.errors()
    ]


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Invalid input is a 400, not FastAPI's default 422."""
    errors = field_errors(exc)
    logger.debug("Validation failed on %s: %s", request.url.path, [e["field"] for e in errors])
    return JSONResponse(status_code=400, content={"detail": errors})


@app.get("/")
async def root():
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


for module, path, tag in ROUTERS:
    app.include_router(module.router, prefix=f"{API_PREFIX}{path}", tags=[tag])
