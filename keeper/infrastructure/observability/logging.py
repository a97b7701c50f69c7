"""
structlog wiring for tacit-keeper.

Every entry is a single JSON object on stdout carrying level, logger name,
ISO timestamp and the service tag, so API and worker output can share a sink.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.stdlib import LoggerFactory

SERVICE_NAME = "tacit-keeper"

# Client libraries log every request at INFO.
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def setup_logging(log_level: str = "INFO") -> None:
    """
    Route structlog through stdlib logging and render JSON lines.

    Args:
        log_level: Name of the minimum level, case-insensitive (e.g. "debug")
    """
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            _add_service_context,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def _add_service_context(logger, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Tag every entry with the service name so shared log sinks can filter on it."""
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def get_logger(name: str = None) -> structlog.stdlib.BoundLogger:
    """Module-level loggers: ``logger = get_logger(__name__)``."""
    return structlog.get_logger(name)


def log_request(method: str, path: str, status_code: int, duration_ms: float):
    """One access-log line per API call; 4xx and 5xx are logged as warnings."""
    fields = {
        "kind": "http_request",
        "method": method,
        "path": path,
        "status_code": status_code,
        "duration_ms": duration_ms,
    }
    logger = get_logger("keeper.http")
    if status_code >= 400:
        logger.warning("API request returned an error status", **fields)
    else:
        logger.info("API request served", **fields)
