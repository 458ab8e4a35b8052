"""
Edge Protocol - How nodes connect in a graph.

Every node owns exactly one routing rule:

- static: always continue to a fixed target (possibly END)
- conditional: call a decision function on the merged state and look its
  label up in a path map {label: target}

Decision functions should return a closed set of labels. Annotating the
return type as a ``Literal[...]`` or an ``Enum`` lets the compiler check that
every possible label is mapped before anything runs:

    def route_after_policy(state) -> Literal["finalize", "human_approval", "auto_approve"]:
        ...
"""

from collections.abc import Callable
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, model_validator

# Sentinels, shared with LangGraph-style graph definitions
END = "__end__"
START = "__start__"

DecisionFunction = Callable[..., Any]


class EdgeKind(StrEnum):
    """How an edge chooses its target."""

    STATIC = "static"  # Fixed target
    CONDITIONAL = "conditional"  # Decision function + path map


class EdgeSpec(BaseModel):
    """
    Specification for the routing rule leaving one node.

    Examples:
        # Static edge
        EdgeSpec(source="initial_review", target="policy_check")

        # Conditional edge
        EdgeSpec(
            source="policy_check",
            kind=EdgeKind.CONDITIONAL,
            condition=route_after_policy,
            path_map={"finalize": "finalize", "auto_approve": "auto_approve"},
        )
    """

    source: str = Field(description="Node that owns this routing rule")
    kind: EdgeKind = EdgeKind.STATIC

    # Static edges
    target: str | None = Field(default=None, description="Fixed target node or END")

    # Conditional edges
    condition: DecisionFunction | None = Field(default=None, exclude=True)
    path_map: dict[str, str] = Field(
        default_factory=dict,
        description="Map decision labels to target nodes (or END)",
    )

    description: str = ""

    model_config = {"arbitrary_types_allowed": True, "frozen": True}

    @model_validator(mode="after")
    def _check_shape(self) -> "EdgeSpec":
        if self.kind == EdgeKind.STATIC:
            if not self.target:
                raise ValueError(f"Static edge from '{self.source}' needs a target")
            if self.condition is not None or self.path_map:
                raise ValueError(f"Static edge from '{self.source}' cannot have a condition")
        else:
            if self.condition is None:
                raise ValueError(f"Conditional edge from '{self.source}' needs a condition")
            if not self.path_map:
                raise ValueError(f"Conditional edge from '{self.source}' needs a path map")
        return self

    @property
    def is_conditional(self) -> bool:
        return self.kind == EdgeKind.CONDITIONAL

    def targets(self) -> list[str]:
        """Every node (or END) this edge can lead to."""
        if self.kind == EdgeKind.STATIC:
            return [self.target] if self.target else []
        return list(dict.fromkeys(self.path_map.values()))

    def labels(self) -> list[str]:
        return list(self.path_map)

    def describe(self) -> str:
        if self.kind == EdgeKind.STATIC:
            return f"{self.source} -> {self.target}"
        name = getattr(self.condition, "__name__", "decision")
        return f"{self.source} -?{name}-> {sorted(self.path_map)}"
