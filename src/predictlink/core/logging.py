# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Structured logging configuration for PredictLink.

Provides:
- JSON formatter for production (machine-parseable)
- Standard formatter for development (human-readable)
- Operation IDs binding every log line to one ledger operation
- A domain event logger that relays committed events to the log
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .events import DomainEvent

_operation_id: ContextVar[str | None] = ContextVar("operation_id", default=None)

MAX_LOGGED_STRING = 500


def get_operation_id() -> str | None:
    """Get the ID of the ledger operation currently executing, if any."""
    return _operation_id.get()


def generate_operation_id() -> str:
    return str(uuid.uuid4())


@contextmanager
def operation_context(
    operation_id: str | None = None,
) -> Generator[str, None, None]:
    """Bind an operation ID for the duration of a ledger operation.

    Nested contexts reuse the outer ID, so every log line emitted while an
    operation runs (including savepoints inside a batch) shares one ID.

    Args:
        operation_id: Optional ID to use. If None, the current one is kept
            or a new one is generated.

    Yields:
        The operation ID being used.
    """
    current = _operation_id.get()
    oid = operation_id or current or generate_operation_id()
    token = _operation_id.set(oid)
    try:
        yield oid
    finally:
        _operation_id.reset(token)


class JSONFormatter(logging.Formatter):
    """One JSON object per line; committed domain events under ``event``."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        operation_id = get_operation_id()
        if operation_id:
            entry["operation_id"] = operation_id
        if record.levelno >= logging.WARNING:
            entry["location"] = f"{record.pathname}:{record.lineno}"
        event = getattr(record, "domain_event", None)
        if event is not None:
            entry["event"] = event
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class StandardFormatter(logging.Formatter):
    """Plain text for terminals, tagged with the short operation ID."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        operation_id = get_operation_id()
        if operation_id:
            line = f"[{operation_id[:8]}] {line}"
        event = getattr(record, "domain_event", None)
        if event is not None:
            line += f" (seq {event['sequence']})"
        return line


def configure_logging(
    level: str | int = "INFO",
    json_format: bool | None = None,
    log_file: str | None = None,
) -> None:
    """Configure logging for PredictLink.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON format (auto-detect from the terminal if None)
        log_file: Optional file to write logs to

    Environment variables:
        PREDICTLINK_LOG_LEVEL: Override log level
        PREDICTLINK_LOG_FORMAT: Log format ("json" or "text", auto-detect if unset)
        PREDICTLINK_LOG_FILE: Log file path
    """
    from .config import get_config

    config = get_config()

    level = config.log_level if level == "INFO" else level
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    if json_format is None:
        format_env = config.log_format.lower()
        if format_env == "json":
            json_format = True
        elif format_env == "text":
            json_format = False
        else:
            json_format = not sys.stderr.isatty()

    log_file = config.log_file if log_file is None else log_file

    formatter: logging.Formatter
    if json_format:
        formatter = JSONFormatter()
    else:
        formatter = StandardFormatter()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        # Always use JSON for file output
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class DomainEventLogger:
    """Relays committed domain events to the log.

    Subscribed to the protocol's EventLog; receives each event once, after
    the ledger operation that produced it has committed.
    """

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.INFO):
        self.logger = logger or logging.getLogger("predictlink.events")
        self.level = level

    def __call__(self, event: DomainEvent) -> None:
        self.logger.log(
            self.level,
            f"{event.name} {event.entity_id} -> {event.status}",
            extra={
                "domain_event": {
                    "sequence": event.sequence,
                    "event": str(event.name),
                    "entity_id": event.entity_id,
                    "status": event.status,
                    "source": event.source,
                    "timestamp": event.timestamp,
                    "payload": self._sanitize(event.payload),
                }
            },
        )

    def _sanitize(self, data: Any) -> Any:
        """Recursively truncate long strings (evidence URIs, justifications)."""
        if isinstance(data, dict):
            return {key: self._sanitize(value) for key, value in data.items()}
        elif isinstance(data, list | tuple):
            return [self._sanitize(item) for item in data]
        elif isinstance(data, str) and len(data) > MAX_LOGGED_STRING:
            return data[:MAX_LOGGED_STRING] + "..."
        else:
            return data
