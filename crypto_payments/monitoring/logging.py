"""
Structured logging for the payments API.

structlog renders every event as one JSON line on stdout. uvicorn's own
loggers are routed through the same handler so access and error logs
share the format. Payment fields bound with payment_context() are added
to every event logged while the block runs.
"""
import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import structlog
from pythonjsonlogger import jsonlogger

from crypto_payments.config import get_settings

UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def add_service_name(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    settings = get_settings()
    event_dict.setdefault("service", settings.app_name)
    event_dict.setdefault("env", settings.app_env)
    return event_dict


def _json_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"asctime": "@timestamp", "levelname": "level", "name": "logger"},
        )
    )
    return handler


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        level: Log level override (defaults to settings.log_level)
    """
    settings = get_settings()
    log_level = getattr(logging, (level or settings.log_level).upper())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            add_service_name,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(_json_handler())
    root_logger.setLevel(log_level)

    # uvicorn installs its own handlers; send its records to the root instead
    for name in UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True

    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.database_echo else logging.WARNING
    )
    logging.getLogger("PIL").setLevel(logging.INFO)

    structlog.get_logger(__name__).info(
        "logging_configured", log_level=logging.getLevelName(log_level)
    )


@contextmanager
def payment_context(payment_id: str, currency: Optional[str] = None) -> Iterator[None]:
    """Bind payment fields to every log event inside the block."""
    fields = {"payment_id": payment_id}
    if currency is not None:
        fields["currency"] = currency
    with structlog.contextvars.bound_contextvars(**fields):
        yield
