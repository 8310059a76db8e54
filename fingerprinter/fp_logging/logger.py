"""
Structured logging for collection runs and suspicion findings.

Every record is one JSON object with event_type, level, timestamp, logger
name and whatever context the call site passes (source, timeout_ms, rule,
confidence, ...). run_context() binds a run_id through structlog's
contextvars so events logged from concurrently running sources all carry
the id of the generate() call that started them.

Uses only Python stdlib logging and structlog; no fingerprinter imports to avoid circular imports.
"""

from __future__ import annotations

import logging
import os
import sys
import uuid
from contextlib import contextmanager
from typing import Any, Iterator

import structlog

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL_VALUE = getattr(logging, LOG_LEVEL, logging.INFO)

# JSON output for services (LOG_FORMAT=json); human-readable for local runs
LOG_FORMAT = os.getenv("LOG_FORMAT", "json").strip().lower()


def _rename_event(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """structlog 'event' -> event_type."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    return event_dict


def _drop_unset(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Drop context keys logged as None (e.g. suspicion_score when analysis is off)."""
    return {k: v for k, v in event_dict.items() if v is not None}


def configure_structlog() -> None:
    """Configure structlog once at import: contextvars, level, ISO timestamp, renderer."""
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
        structlog.processors.format_exc_info,
        _rename_event,
        _drop_unset,
    ]
    if LOG_FORMAT == "json":
        processors.append(structlog.processors.JSONRenderer(default=str))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(LOG_LEVEL_VALUE),
        context_class=dict,
        # stdout stays free for the embedding application
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Return a structured logger for the given module name.

        logger = get_logger(__name__)
        logger.warning("signal_source_timeout", source="audio", timeout_ms=5000)
    """
    return structlog.get_logger(name).bind(logger=name)


def new_run_id() -> str:
    return uuid.uuid4().hex[:12]


@contextmanager
def run_context(run_id: str | None = None) -> Iterator[str]:
    """
    Bind run_id to every event logged inside the block, including events from
    asyncio tasks created inside it. Yields the id.
    """
    run_id = run_id or new_run_id()
    with structlog.contextvars.bound_contextvars(run_id=run_id):
        yield run_id
