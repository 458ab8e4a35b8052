"""
Graph errors - everything that can stop a compile or a run.

Compile-time problems are raised from ``compile()``. Run-time problems are
never raised out of ``invoke()``; they are carried on the ExecutionResult of
a FAILED run (see ``ExecutionResult.raise_for_status``).
"""

from typing import Any


class GraphError(Exception):
    """Base class for every flowstate graph error."""


class CompileError(GraphError):
    """A graph definition is malformed and cannot be compiled."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("Invalid graph: " + "; ".join(self.errors))


class UnknownChannelError(GraphError, KeyError):
    """An update or initial state names a channel the graph never declared."""

    def __init__(self, channel: str, declared: list[str] | None = None):
        self.channel = channel
        self.declared = sorted(declared or [])
        super().__init__(channel)

    def __str__(self) -> str:
        return f"Unknown channel '{self.channel}'. Declared channels: {self.declared}"


class RoutingError(GraphError):
    """A conditional edge could not resolve its next node."""

    def __init__(
        self,
        source: str,
        label: Any = None,
        allowed: list[str] | None = None,
        message: str | None = None,
    ):
        self.source = source
        self.label = label
        self.allowed = sorted(allowed or [])
        if message is None:
            message = (
                f"Decision function for '{source}' returned label {label!r}, "
                f"which is not in its path map {self.allowed}"
            )
        super().__init__(message)


class NodeError(GraphError):
    """A node failed; ``cause`` is the underlying exception."""

    def __init__(self, node_name: str, cause: BaseException):
        self.node_name = node_name
        self.cause = cause
        super().__init__(f"Node '{node_name}' failed: {type(cause).__name__}: {cause}")


class StepBudgetExceeded(GraphError):
    """The run used its whole step budget without reaching END."""

    def __init__(self, max_steps: int, node_name: str):
        self.max_steps = max_steps
        self.node_name = node_name
        super().__init__(
            f"Step budget of {max_steps} exceeded after node '{node_name}'; "
            "the graph is probably not terminating"
        )
