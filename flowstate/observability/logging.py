"""
Structured logging with automatic run context.

Every log line emitted while a graph runs carries the run's identifiers
without anybody passing them around:

    CompiledGraph.invoke() → GraphExecutor sets run_id + graph_id
        ↓ (ContextVar, follows the asyncio task)
    each step → adds node_id + step
        ↓
    node code → logger.info("...") is tagged automatically

Concurrent runs live in separate asyncio tasks, so each sees its own context.
"""

import json
import logging
import os
import re
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

run_context: ContextVar[dict[str, Any] | None] = ContextVar("run_context", default=None)

ANSI_ESCAPE_PATTERN = re.compile(r"\x1b\[[0-9;]*m")

# Record attributes copied into JSON output when a caller passes them via extra=
EXTRA_FIELDS = ("event", "latency_ms", "node_id", "step", "status")


def strip_ansi_codes(text: str) -> str:
    return ANSI_ESCAPE_PATTERN.sub("", text)


class StructuredFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, logger, message, run context."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": strip_ansi_codes(record.getMessage()),
        }
        entry.update(run_context.get() or {})

        for name in EXTRA_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                entry[name] = value

        if record.exc_info:
            entry["exception"] = strip_ansi_codes(self.formatException(record.exc_info))

        return json.dumps(entry, default=str)


class HumanReadableFormatter(logging.Formatter):
    """Colourised single-line format with a short run/node prefix."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        context = run_context.get() or {}
        prefix_parts = []
        if context.get("run_id"):
            prefix_parts.append(f"run:{str(context['run_id'])[-8:]}")
        if context.get("graph_id"):
            prefix_parts.append(f"graph:{context['graph_id']}")
        if context.get("node_id"):
            prefix_parts.append(f"node:{context['node_id']}")
        prefix = f"[{' | '.join(prefix_parts)}] " if prefix_parts else ""

        color = self.COLORS.get(record.levelname, "")
        message = f"{color}[{record.levelname:<8}]{self.RESET} {prefix}{record.getMessage()}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message


def configure_logging(level: str = "INFO", format: str = "auto") -> None:
    """
    Configure root logging once at startup (CLI entry points, test fixtures).

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        format: "json", "human", or "auto" (JSON when LOG_FORMAT=json or
            ENV=production, human-readable otherwise)
    """
    if format == "auto":
        if os.getenv("LOG_FORMAT", "").lower() == "json" or (
            os.getenv("ENV", "development").lower() == "production"
        ):
            format = "json"
        else:
            format = "human"

    formatter: logging.Formatter
    if format == "json":
        formatter = StructuredFormatter()
        # litellm prints its own banners; keep JSON output parseable
        os.environ["NO_COLOR"] = "1"
        os.environ.setdefault("LITELLM_LOG", "ERROR")
    else:
        formatter = HumanReadableFormatter()

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level.upper())

    for name in ("LiteLLM", "httpx", "httpcore"):
        noisy = logging.getLogger(name)
        noisy.handlers.clear()
        noisy.propagate = True
        if format == "json":
            noisy.setLevel(logging.WARNING)


def set_trace_context(**kwargs: Any) -> None:
    """Add fields to the current run context."""
    current = run_context.get() or {}
    run_context.set({**current, **kwargs})


def restore_trace_context(saved: dict[str, Any] | None) -> None:
    """Put back a context previously captured with ``get_trace_context``."""
    run_context.set(dict(saved) if saved else None)


def get_trace_context() -> dict[str, Any]:
    return dict(run_context.get() or {})


def clear_trace_context() -> None:
    run_context.set(None)
