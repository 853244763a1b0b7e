"""
Observability module for the option tree engine.

Provides:
- Structured logging with JSON format and correlation IDs
- Correlation ID propagation through a context variable
- Prometheus metrics for validation and resolution

Usage:
    from option_tree.core.observability import (
        configure_structured_logging,
        set_correlation_id,
        metrics,
    )
"""

import json
import logging
import uuid
from contextvars import ContextVar
from datetime import UTC, datetime

from prometheus_client import CollectorRegistry, Counter, Histogram

# ============================================================================
# Context Variables
# ============================================================================

# Correlation ID - links all log lines for one host request or job
_correlation_id_ctx: ContextVar[str] = ContextVar("correlation_id", default="")


def generate_correlation_id() -> str:
    """Generate a unique correlation ID."""
    return str(uuid.uuid4())


def get_correlation_id() -> str:
    """Get the current correlation ID from context."""
    return _correlation_id_ctx.get()


def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID for the current context."""
    _correlation_id_ctx.set(correlation_id)


# ============================================================================
# Structured Logging Configuration
# ============================================================================

# Attributes every LogRecord carries; anything else came from `extra=`.
_RESERVED_RECORD_KEYS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "getMessage",
        "exc_info",
        "exc_text",
        "stack_info",
        "message",
        "asctime",
    }
)


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs logs as JSON with standard fields:
    - timestamp: ISO 8601 format
    - level: Log level
    - logger: Logger name
    - message: Log message
    - correlation_id: Correlation ID (if set)
    - exception: Exception type and message (if present)
    - extra: Any additional context from logging.extra
    - service / env: Service name and environment, when configured
    """

    def __init__(self, service: str | None = None, env: str | None = None) -> None:
        super().__init__()
        self.service = service
        self.env = env

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.service:
            log_entry["service"] = self.service
        if self.env:
            log_entry["env"] = self.env

        correlation_id = get_correlation_id()
        if correlation_id:
            log_entry["correlation_id"] = correlation_id

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
            }

        log_entry["function"] = record.funcName
        log_entry["line"] = record.lineno

        extra_keys = {
            k: v for k, v in record.__dict__.items() if k not in _RESERVED_RECORD_KEYS
        }
        if extra_keys:
            log_entry["extra"] = extra_keys

        return json.dumps(log_entry, default=str)


def configure_structured_logging(
    level: str = "INFO",
    structured: bool = True,
    service: str | None = None,
    env: str | None = None,
) -> None:
    """
    Configure the root logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        structured: Emit JSON lines when True, plain text otherwise
        service: Service name stamped on every JSON line (e.g. settings.app_name)
        env: Environment stamped on every JSON line (e.g. settings.app_env)
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler()
    if structured:
        handler.setFormatter(StructuredFormatter(service=service, env=env))
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))

    root_logger.addHandler(handler)


# ============================================================================
# Prometheus Metrics
# ============================================================================

# Custom registry so a host service's default registry is never polluted
_registry = CollectorRegistry()


class Metrics:
    """
    Centralized metrics for the option tree engine.

    Metrics groups:
    - Validation: structural validation outcomes and error counts
    - Resolution: visibility resolution count, latency and output size
    """

    def __init__(self, registry: CollectorRegistry) -> None:
        self.registry = registry

        # -------------------------------------------------------------------
        # Validation Metrics
        # -------------------------------------------------------------------

        self.tree_validations_total = Counter(
            "option_tree_validations_total",
            "Total option tree validations",
            ["result"],
            registry=self.registry,
        )

        self.tree_validation_errors = Histogram(
            "option_tree_validation_errors",
            "Number of errors reported by a failed validation",
            buckets=(1, 2, 5, 10, 25, 50, 100),
            registry=self.registry,
        )

        # -------------------------------------------------------------------
        # Resolution Metrics
        # -------------------------------------------------------------------

        self.resolutions_total = Counter(
            "option_tree_resolutions_total",
            "Total visibility resolutions",
            ["status"],
            registry=self.registry,
        )

        self.resolution_duration_seconds = Histogram(
            "option_tree_resolution_duration_seconds",
            "Visibility resolution duration in seconds",
            buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 1.0),
            registry=self.registry,
        )

        self.visible_nodes_count = Histogram(
            "option_tree_visible_nodes_count",
            "Number of visible nodes returned by a resolution",
            buckets=(1, 5, 10, 25, 50, 100, 250, 500, 1000),
            registry=self.registry,
        )


# Global metrics instance
metrics = Metrics(_registry)

