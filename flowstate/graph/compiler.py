"""
Graph Compiler - validates a GraphDefinition and freezes it for execution.

Every check runs before any node does, and all problems are reported
together in one CompileError:

- static targets and path-map values are declared nodes or END
- every routing rule starts at a declared node
- the entry point is set and declared
- every node has exactly one routing rule
- node names are unique and are not END/START
- decision functions with a Literal[...] or Enum return annotation map
  every label they can return

Unreachable nodes are not errors; they are logged as warnings.
"""

import enum
import logging
import typing
from collections import deque
from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Literal

from flowstate.config import RunConfig
from flowstate.graph.channels import Channel
from flowstate.graph.edge import END, START, DecisionFunction, EdgeSpec
from flowstate.graph.errors import CompileError
from flowstate.graph.executor import ExecutionResult, GraphExecutor, StepRecord
from flowstate.graph.node import NodeSpec
from flowstate.graph.router import Router
from flowstate.graph.state_graph import GraphDefinition

logger = logging.getLogger(__name__)

RESERVED_NAMES = frozenset({END, START})


def declared_labels(condition: DecisionFunction) -> list[str] | None:
    """
    Labels a decision function can return, read from its return annotation.

    Returns None when the annotation is missing or not a closed set.
    """
    try:
        hints = typing.get_type_hints(condition)
    except Exception:
        # Unresolvable forward refs, builtins, partials: nothing to check against
        return None

    annotation = hints.get("return")
    if annotation is None:
        return None
    if typing.get_origin(annotation) is Literal:
        return [_label_text(arg) for arg in typing.get_args(annotation)]
    if isinstance(annotation, type) and issubclass(annotation, enum.Enum):
        return [_label_text(member) for member in annotation]
    return None


def _label_text(label: Any) -> str:
    value = label.value if isinstance(label, enum.Enum) else label
    return value if isinstance(value, str) else str(value)


@dataclass(frozen=True)
class CompiledGraph:
    """
    An immutable, validated graph ready to run.

    Nodes live in an arena (``nodes``) with a name to index lookup; routing
    rules are keyed by source node name. A compiled graph holds no run
    state, so one instance can serve any number of concurrent runs.
    """

    graph_id: str
    channels: Mapping[str, Channel]
    nodes: tuple[NodeSpec, ...]
    node_index: Mapping[str, int]
    routes: Mapping[str, EdgeSpec]
    entry_point: str
    config: RunConfig = field(default_factory=RunConfig)

    @property
    def node_names(self) -> list[str]:
        return [node.name for node in self.nodes]

    def get_node(self, name: str) -> NodeSpec:
        return self.nodes[self.node_index[name]]

    def router(self) -> Router:
        return Router(self.routes)

    async def invoke(
        self,
        initial_state: Mapping[str, Any] | None = None,
        *,
        interrupt: Any = None,
        services: Mapping[str, Any] | None = None,
        config: RunConfig | None = None,
        event_bus: Any = None,
        run_id: str | None = None,
    ) -> ExecutionResult:
        """
        Run the graph from its entry point to a terminal status.

        Run-time failures are reported on the result, never raised; call
        ``result.raise_for_status()`` to turn a FAILED run into an exception.
        """
        executor = GraphExecutor(
            self,
            interrupt=interrupt,
            services=services,
            config=config,
            event_bus=event_bus,
            run_id=run_id,
        )
        return await executor.execute(initial_state)

    async def stream(
        self,
        initial_state: Mapping[str, Any] | None = None,
        *,
        interrupt: Any = None,
        services: Mapping[str, Any] | None = None,
        config: RunConfig | None = None,
        event_bus: Any = None,
        run_id: str | None = None,
    ) -> AsyncIterator[StepRecord]:
        """Yield each StepRecord as soon as its step is merged."""
        executor = GraphExecutor(
            self,
            interrupt=interrupt,
            services=services,
            config=config,
            event_bus=event_bus,
            run_id=run_id,
        )
        async for record in executor.stream(initial_state):
            yield record

    def describe(self) -> str:
        """Human-readable outline of the graph."""
        lines = [f"Graph '{self.graph_id}' (entry: {self.entry_point})"]
        lines.append(f"  channels: {', '.join(self.channels)}")
        for node in self.nodes:
            lines.append(f"  {self.routes[node.name].describe()}")
        return "\n".join(lines)


class GraphCompiler:
    """Checks graph definitions and produces CompiledGraphs."""

    def validate(self, definition: GraphDefinition) -> list[str]:
        """Return every structural problem in ``definition`` (empty if none)."""
        errors: list[str] = []
        names = definition.node_names()
        declared = set(names)

        seen: set[str] = set()
        for name in names:
            if name in RESERVED_NAMES:
                errors.append(f"Node name '{name}' is reserved")
            if name in seen:
                errors.append(f"Duplicate node '{name}'")
            seen.add(name)

        if definition.entry_point is None:
            errors.append("Entry point is not set")
        elif definition.entry_point not in declared:
            errors.append(f"Entry point '{definition.entry_point}' is not a declared node")

        rules_per_node: dict[str, int] = {}
        for edge in definition.edges:
            if edge.source not in declared:
                errors.append(f"Edge '{edge.describe()}' starts at undeclared node '{edge.source}'")
            else:
                rules_per_node[edge.source] = rules_per_node.get(edge.source, 0) + 1

            for target in edge.targets():
                if target != END and target not in declared:
                    errors.append(f"Edge '{edge.describe()}' targets undeclared node '{target}'")

            if edge.is_conditional:
                labels = declared_labels(edge.condition)
                if labels is not None:
                    missing = [label for label in labels if label not in edge.path_map]
                    if missing:
                        errors.append(
                            f"Conditional edge from '{edge.source}' does not map labels {missing}"
                        )

        for name in dict.fromkeys(names):
            count = rules_per_node.get(name, 0)
            if count == 0:
                errors.append(f"Node '{name}' has no outgoing edge")
            elif count > 1:
                errors.append(f"Node '{name}' has {count} routing rules; exactly one is allowed")

        return errors

    def compile(
        self,
        definition: GraphDefinition,
        config: RunConfig | None = None,
    ) -> CompiledGraph:
        errors = self.validate(definition)
        if errors:
            for error in errors:
                logger.error(f"   • {error}")
            raise CompileError(errors)

        routes = {edge.source: edge for edge in definition.edges}
        for name in self._unreachable(definition.entry_point, routes, definition.node_names()):
            logger.warning(f"⚠ Node '{name}' is unreachable from '{definition.entry_point}'")

        return CompiledGraph(
            graph_id=definition.graph_id,
            channels=MappingProxyType(dict(definition.channels)),
            nodes=definition.nodes,
            node_index=MappingProxyType({node.name: i for i, node in enumerate(definition.nodes)}),
            routes=MappingProxyType(routes),
            entry_point=definition.entry_point,
            config=config or RunConfig(),
        )

    @staticmethod
    def _unreachable(entry: str, routes: Mapping[str, EdgeSpec], names: list[str]) -> list[str]:
        reached = {entry}
        queue = deque([entry])
        while queue:
            for target in routes[queue.popleft()].targets():
                if target != END and target not in reached:
                    reached.add(target)
                    queue.append(target)
        return [name for name in names if name not in reached]


def compile_graph(definition: GraphDefinition, config: RunConfig | None = None) -> CompiledGraph:
    """Shorthand for ``GraphCompiler().compile(definition, config)``."""
    return GraphCompiler().compile(definition, config=config)
