# fieldbook/utils/my_logging.py
"""Logging configuration, with the request's correlation ID on every line"""
import logging
import sys
from contextvars import ContextVar
from fieldbook.config.settings import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] %(message)s"

# Set per request by the correlation-id middleware
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="-")

QUIET_LOGGERS = (
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "redis",
    "httpx",
    "uvicorn.access",
)


class CorrelationIdFilter(logging.Filter):
    """Stamps records with the current request's correlation ID"""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = correlation_id_var.get()
        return True


def resolve_level(verbose: bool = True) -> int:
    settings = get_settings()
    if not verbose:
        return logging.WARNING
    if settings.DEBUG:
        return logging.DEBUG
    return getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)


def setup_logging(verbose=True):
    """Configure application logging"""
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logging.basicConfig(level=resolve_level(verbose), handlers=[handler], force=True)

    # Per-query and per-request chatter only at WARNING unless debugging
    quiet_level = logging.DEBUG if get_settings().DEBUG else logging.WARNING
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)
