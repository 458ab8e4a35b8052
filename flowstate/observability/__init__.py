"""
Observability: run-scoped trace context and structured logging.

Loggers stay plain ``logging.getLogger(__name__)``; the formatters pick up
run_id, graph_id, node_id and step from a ContextVar set by the executor.
"""

from flowstate.observability.logging import (
    clear_trace_context,
    configure_logging,
    get_trace_context,
    restore_trace_context,
    set_trace_context,
)

__all__ = [
    "configure_logging",
    "get_trace_context",
    "set_trace_context",
    "restore_trace_context",
    "clear_trace_context",
]
