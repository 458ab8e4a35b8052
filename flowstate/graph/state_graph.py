"""
StateGraph - incremental builder for graph definitions.

    graph = StateGraph([
        Channel("amount_usd", default=0),
        Channel("logs", reducer=append, default_factory=list),
        Channel("status", default="PENDING"),
    ])
    graph.add_node("initial_review", initial_review)
    graph.add_node("policy_check", policy_check)
    graph.set_entry_point("initial_review")
    graph.add_edge("initial_review", "policy_check")
    graph.add_conditional_edges("policy_check", route_after_policy, {...})
    app = graph.compile()

The builder does not validate; it only records. Every structural problem is
reported together by ``compile()``.
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field, SkipValidation

from flowstate.graph.channels import Channel, Reducer, normalize_channels
from flowstate.graph.edge import START, DecisionFunction, EdgeKind, EdgeSpec
from flowstate.graph.node import NodeFunction, NodeSpec

if TYPE_CHECKING:
    from flowstate.config import RunConfig
    from flowstate.graph.compiler import CompiledGraph


class GraphDefinition(BaseModel):
    """
    Frozen description of a graph, as handed to the compiler.

    Nodes and edges are kept in declaration order and duplicates are kept,
    so the compiler can point at them.
    """

    graph_id: str = "graph"
    channels: SkipValidation[dict[str, Channel]] = Field(default_factory=dict)
    nodes: tuple[NodeSpec, ...] = ()
    edges: tuple[EdgeSpec, ...] = ()
    entry_point: str | None = None

    model_config = {"arbitrary_types_allowed": True, "frozen": True}

    def node_names(self) -> list[str]:
        return [node.name for node in self.nodes]


class StateGraph:
    """Builder for a graph over a fixed set of channels."""

    def __init__(
        self,
        channels: Iterable[Channel] | Mapping[str, Channel | Reducer | None],
        *,
        graph_id: str = "graph",
    ):
        self.graph_id = graph_id
        self._channels = normalize_channels(channels)
        self._nodes: list[NodeSpec] = []
        self._edges: list[EdgeSpec] = []
        self._entry_point: str | None = None

    def add_node(
        self,
        name: str,
        fn: NodeFunction,
        *,
        description: str = "",
        timeout: float | None = None,
    ) -> "StateGraph":
        if not callable(fn):
            raise TypeError(f"Node '{name}' must be callable, got {type(fn).__name__}")
        self._nodes.append(NodeSpec(name=name, fn=fn, description=description, timeout=timeout))
        return self

    def add_edge(self, source: str, target: str) -> "StateGraph":
        """Always continue from ``source`` to ``target`` (a node or END)."""
        if source == START:
            return self.set_entry_point(target)
        self._edges.append(EdgeSpec(source=source, kind=EdgeKind.STATIC, target=target))
        return self

    def add_conditional_edges(
        self,
        source: str,
        condition: DecisionFunction,
        path_map: Mapping[Any, str] | Sequence[str],
        *,
        description: str = "",
    ) -> "StateGraph":
        """
        Route from ``source`` by calling ``condition`` on the merged state.

        ``path_map`` maps labels to targets; a plain list of names means each
        name is both label and target.
        """
        if isinstance(path_map, Mapping):
            mapping = {_as_label(label): target for label, target in path_map.items()}
        else:
            mapping = {name: name for name in path_map}
        self._edges.append(
            EdgeSpec(
                source=source,
                kind=EdgeKind.CONDITIONAL,
                condition=condition,
                path_map=mapping,
                description=description,
            )
        )
        return self

    def set_entry_point(self, name: str) -> "StateGraph":
        self._entry_point = name
        return self

    def definition(self) -> GraphDefinition:
        return GraphDefinition(
            graph_id=self.graph_id,
            channels=dict(self._channels),
            nodes=tuple(self._nodes),
            edges=tuple(self._edges),
            entry_point=self._entry_point,
        )

    def compile(self, config: "RunConfig | None" = None) -> "CompiledGraph":
        """Validate and freeze the graph. Raises CompileError."""
        from flowstate.graph.compiler import GraphCompiler

        return GraphCompiler().compile(self.definition(), config=config)


def _as_label(label: Any) -> str:
    # Enum members are stored by value so lookups match either form
    value = getattr(label, "value", label)
    return value if isinstance(value, str) else str(value)
