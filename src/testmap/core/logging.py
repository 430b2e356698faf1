"""
Structured logging for testmap.

Configures structlog once per process and hands out structured loggers.
Every module logs through ``get_logger(__name__)`` with dotted event names
and key/value fields, so CI output can be read by humans (console) or
shipped to log aggregation (JSON).

Architecture:
    ::

        configure_logging(level="INFO", json_format=None, service="testmap")
            │
            ▼
        structlog processor chain:
          1. TimeStamper (ISO)
          2. merge_contextvars       (bind_context / LogContext fields)
          3. add_log_level
          4. StackInfoRenderer / set_exc_info
          5. add_service_metadata
          6. JSONRenderer (non-tty) or ConsoleRenderer (tty)

Examples:
    >>> from testmap.core.logging import configure_logging, get_logger
    >>> configure_logging(level="INFO", json_format=True)
    >>> logger = get_logger(__name__)
    >>> logger.info("resolver.batch_resolved", tests=1200, unknown=14)

    Timing a step:

    >>> with log_step("verify.scan", candidate=1200) as timer:
    ...     regressions = verify(old, new)
    ...     timer.add_metric("regressions", len(regressions))

Tags:
    logging, structlog, observability, json-logging, testmap
"""

from __future__ import annotations

import logging
import sys
import time
import traceback
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

_SERVICE_NAME = "testmap"


def _add_service_metadata(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add service-level metadata to all logs."""
    event_dict.setdefault("service.name", _SERVICE_NAME)
    return event_dict


def _elasticsearch_compatible(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Make field names Elasticsearch/ECS compatible."""
    if "timestamp" in event_dict:
        event_dict["@timestamp"] = event_dict.pop("timestamp")

    if "level" in event_dict:
        event_dict["log.level"] = event_dict.pop("level")

    return event_dict


def _stderr_logger(*args: Any) -> structlog.PrintLogger:
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "testmap",
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: True for JSON, False for console, None for auto (JSON if not tty)
        service: Service name to include in logs
        add_timestamp: Include ISO timestamp in logs
    """
    global _SERVICE_NAME
    _SERVICE_NAME = service

    if json_format is None:
        json_format = not sys.stderr.isatty()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_metadata,
    ]

    if add_timestamp:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso", utc=True))

    if json_format:
        shared_processors.append(_elasticsearch_compatible)
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper())
        ),
        context_class=dict,
        # stdout is reserved for command output; stderr is looked up per logger.
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger.

    Args:
        name: Logger name (usually __name__), bound as the ``logger_name`` field
    """
    if name is None:
        return structlog.get_logger()
    return structlog.get_logger(logger_name=name)


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs.

    Example:
        bind_context(reference="mapping.json")
        logger.info("verify.started")  # Includes reference
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove specific keys from logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    """Clear all bound context."""
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Context manager for scoped logging context.

    Example:
        with LogContext(snapshot="mapping.json"):
            logger.info("snapshot.loaded")
        # Context cleared here
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs

    def __enter__(self) -> LogContext:
        bind_context(**self._context)
        return self

    def __exit__(self, *args) -> None:
        unbind_context(*self._context.keys())


# =============================================================================
# Timing
# =============================================================================


@dataclass
class TimingResult:
    """Result of a timed step."""

    step: str
    started_at: float = field(default_factory=time.perf_counter)
    ended_at: float | None = None
    metrics: dict[str, Any] = field(default_factory=dict)
    error_info: dict[str, Any] | None = None

    def stop(self) -> TimingResult:
        self.ended_at = time.perf_counter()
        return self

    @property
    def duration_ms(self) -> float:
        end = self.ended_at if self.ended_at is not None else time.perf_counter()
        return (end - self.started_at) * 1000

    def add_metric(self, key: str, value: Any) -> TimingResult:
        """Add a metric to include in the log output."""
        self.metrics[key] = value
        return self

    def set_error(self, e: Exception) -> TimingResult:
        self.error_info = {
            "error_type": type(e).__name__,
            "error_message": str(e),
            "error_stack": traceback.format_exc(),
        }
        return self

    def to_log_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"duration_ms": round(self.duration_ms, 2)}
        result.update(self.metrics)
        if self.error_info:
            result["status"] = "error"
            result.update(self.error_info)
        return result


@contextmanager
def log_step(event: str, level: str = "info", **extra_metrics: Any) -> Iterator[TimingResult]:
    """
    Context manager that logs step start/end with timing.

    Logs:
    - Start: DEBUG level (event.start)
    - End: ``level`` (event.end) with duration_ms and any added metrics
    - Error: ERROR level (event.error) with the exception, then re-raises

    Usage:
        with log_step("resolver.batch", tests=len(tests)) as timer:
            records = resolve_all(tests, registry)
            timer.add_metric("unknown", count_unknown(records))
    """
    log = get_logger("testmap.timing")
    timer = TimingResult(step=event, metrics=dict(extra_metrics))
    log.debug(f"{event}.start", **extra_metrics)

    try:
        yield timer
    except Exception as e:
        timer.stop()
        timer.set_error(e)
        log.error(f"{event}.error", **timer.to_log_dict())
        raise

    timer.stop()
    getattr(log, level)(f"{event}.end", **timer.to_log_dict())


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
    "TimingResult",
    "log_step",
]
