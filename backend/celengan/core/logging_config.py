"""
Logging setup: structlog on top of stdlib logging.

Output is JSON in production (or with LOG_FORMAT=json) and coloured console
lines otherwise. Every structlog event carries the app name, environment and
whatever request context the middleware bound (request_id, user_id), so an
``allocation_applied`` event can be traced back to the request that made it.

    setup_logging()
    logger = get_logger(__name__)
    logger.info("allocation_applied", target_id=str(target.id), amount="25000.00")
"""

import logging
import sys
from typing import Any, Dict

import structlog
from pythonjsonlogger import jsonlogger

from celengan.config import settings

# stdlib loggers that get the JSON handler in json mode
JSON_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error", "celengan")

# Too chatty outside development
QUIET_IN_PRODUCTION = ("uvicorn.access", "sqlalchemy.engine")


def _use_json() -> bool:
    return settings.LOG_FORMAT == "json" or settings.ENVIRONMENT == "production"


def _add_app_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    event_dict.setdefault("app", settings.APP_NAME)
    event_dict.setdefault("env", settings.ENVIRONMENT)
    return event_dict


def setup_logging() -> None:
    """Configure stdlib logging and structlog. Calling it again reconfigures."""
    use_json = _use_json()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            _add_app_context,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer() if use_json else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if use_json:
        _install_json_handler()

    if settings.ENVIRONMENT == "production":
        for name in QUIET_IN_PRODUCTION:
            logging.getLogger(name).setLevel(logging.WARNING)


def _install_json_handler() -> None:
    """Format plain stdlib records (uvicorn, module loggers) as JSON too."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        jsonlogger.JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s",
            rename_fields={"asctime": "timestamp", "levelname": "level"},
        )
    )

    for name in JSON_LOGGERS:
        logger = logging.getLogger(name)
        logger.handlers.clear()
        logger.addHandler(handler)
        logger.propagate = False


def bind_request_context(**values: Any) -> None:
    """Attach values to every structlog event for the rest of this request."""
    structlog.contextvars.bind_contextvars(**{k: v for k, v in values.items() if v is not None})


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
