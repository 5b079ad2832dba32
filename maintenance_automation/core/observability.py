"""
Observability Infrastructure

Structured logging and Prometheus metrics for the maintenance automation
engine. Every automation run and HTTP request carries a correlation id.
"""

import contextvars
import logging
import sys
import uuid
from typing import Any

import structlog
from prometheus_client import Counter, Histogram, start_http_server

from .config import settings

# Context variables for correlation tracking
correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)

# Prometheus metrics
AUTOMATION_RUNS = Counter(
    "maintenance_automation_runs_total",
    "Total automation runs",
    ["status"],
)

AUTOMATION_RUN_DURATION = Histogram(
    "maintenance_automation_run_duration_seconds",
    "Automation run duration",
)

WORK_ORDERS_CREATED = Counter(
    "maintenance_work_orders_created_total",
    "Work orders generated automatically",
)

ALERTS_CREATED = Counter(
    "maintenance_alerts_created_total",
    "Maintenance alerts created",
)

TASK_FAILURES = Counter(
    "maintenance_task_failures_total",
    "Tasks that failed during an automation run",
    ["error_type"],
)

TECHNICIAN_SELECTIONS = Counter(
    "maintenance_technician_selections_total",
    "Technician selection outcomes",
    ["outcome"],
)


class CorrelationIdProcessor:
    """Structlog processor to add correlation ID to all log entries."""

    def __call__(
        self, logger: Any, name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        correlation_id = correlation_id_var.get("")
        if correlation_id:
            event_dict.setdefault("correlation_id", correlation_id)
        return event_dict


def setup_structured_logging() -> None:
    """Configure structured logging with JSON output and correlation tracking."""
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    processors = [
        structlog.contextvars.merge_contextvars,
        CorrelationIdProcessor(),
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
    ]

    if settings.LOG_FORMAT == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(colors=settings.ENVIRONMENT == "local")
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    if settings.LOG_SQL:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
    else:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def setup_metrics() -> None:
    """Expose the Prometheus registry on METRICS_PORT when metrics are enabled."""
    if not settings.ENABLE_METRICS:
        return

    start_http_server(settings.METRICS_PORT)


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Set correlation ID for request or run tracking."""
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())

    correlation_id_var.set(correlation_id)
    return correlation_id


def get_correlation_id() -> str:
    """Get current correlation ID."""
    return correlation_id_var.get("")
