"""
Structured Logging
==================

JSON log lines for the SLA engine.

Every record carries the service name, the environment and, while a request
is being served, the request's correlation id. The id lives in a context
variable so code deep inside the domain does not need it passed around.

Usage:
    from helpdesk_sla.shared.infrastructure.logging import get_logger

    logger = get_logger(__name__)
    logger.info("SLA evaluated", extra={"ticket_id": "TKT-001"})
"""

import logging
import sys
import time
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Iterator, Optional, Union

from pythonjsonlogger.json import JsonFormatter

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

# Libraries whose INFO output drowns the service's own lines
QUIET_LOGGERS = ("uvicorn.access", "watchdog")

correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


class CorrelationIdFilter(logging.Filter):
    """Copies the current request's correlation id onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "correlation_id", None):
            current = correlation_id_var.get()
            if current:
                record.correlation_id = current
        return True


class CustomJsonFormatter(JsonFormatter):
    """
    JSON formatter stamping service metadata on every line.

    Fields added: ``timestamp`` (UTC, ISO 8601), ``service``, ``environment``
    and ``correlation_id`` when the record has one.
    """

    def __init__(
        self,
        *args: Any,
        service: str = "helpdesk-sla",
        environment: str = "development",
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self.static_fields = {"service": service, "environment": environment}

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record.setdefault(
            "timestamp",
            datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        )
        correlation_id = getattr(record, "correlation_id", None)
        if correlation_id:
            log_record["correlation_id"] = correlation_id
        log_record.update(self.static_fields)


def setup_logging(
    level: str = "INFO",
    environment: str = "development",
    service: str = "helpdesk-sla",
) -> None:
    """
    Send JSON logs to stdout, replacing any handlers already installed.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR)
        environment: Deployment environment stamped on each line
        service: Service name stamped on each line
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(
        CustomJsonFormatter(
            LOG_FORMAT,
            datefmt="%Y-%m-%dT%H:%M:%S",
            service=service,
            environment=environment,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(numeric_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def get_context_logger(
    name: str,
    correlation_id: Optional[str] = None
) -> Union[logging.Logger, logging.LoggerAdapter]:
    """
    Logger bound to an explicit correlation id.

    Without an id the plain module logger is returned; the filter installed
    by ``setup_logging`` still tags records logged inside a request.
    """
    logger = get_logger(name)
    if not correlation_id:
        return logger
    return logging.LoggerAdapter(logger, {"correlation_id": correlation_id})


@contextmanager
def log_latency(logger, operation: str, **extra_context: Any) -> Iterator[None]:
    """
    Log how long the wrapped block took, in milliseconds.

    Usage:
        with log_latency(logger, "sla_batch_evaluation", tickets=50):
            results = service.evaluate_many(items)
    """
    started = time.perf_counter()
    failed = False
    try:
        yield
    except Exception:
        failed = True
        raise
    finally:
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        log = logger.warning if failed else logger.info
        log(
            f"{operation} {'failed' if failed else 'completed'}",
            extra={"operation": operation, "latency_ms": elapsed_ms, **extra_context},
        )
