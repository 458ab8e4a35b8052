"""
Node Protocol - the unit of work in a graph.

A node is a function of the current state snapshot that returns a partial
update (a mapping of channel name to value, or None for "no change"):

    async def policy_check(state):
        return {"logs": ["Policy Check Passed"]}

A node that needs run services (the model, a tool registry, the interrupt
controller) declares a second positional parameter and receives a
NodeContext:

    async def check_feed(state, ctx):
        if not await ctx.interrupt.sleep(ctx.config.poll_interval):
            return {"should_stop": True}
        ...

Plain synchronous functions are accepted too and are called inline.
"""

import inspect
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from flowstate.config import RunConfig
    from flowstate.graph.interrupt import InterruptController

NodeFunction = Callable[..., Any]


def _accepts_context(fn: Callable[..., Any]) -> bool:
    """True when ``fn`` requires a second positional argument (the NodeContext).

    Parameters with defaults don't count, so ``lambda s, name=name: ...``
    is still a plain state function.
    """
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return False

    positional = [
        p
        for p in sig.parameters.values()
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
        and p.default is inspect.Parameter.empty
    ]
    if any(p.kind == inspect.Parameter.VAR_POSITIONAL for p in sig.parameters.values()):
        return True
    return len(positional) >= 2


class NodeSpec(BaseModel):
    """
    Specification for a node.

    Examples:
        NodeSpec(name="initial_review", fn=initial_review)

        # Bounded node (extension; unlimited by default)
        NodeSpec(name="check_feed", fn=check_feed, timeout=30.0)
    """

    name: str
    fn: NodeFunction = Field(exclude=True)
    description: str = ""
    timeout: float | None = Field(
        default=None,
        description="Seconds before the node is failed; overrides RunConfig.node_timeout",
    )

    model_config = {"arbitrary_types_allowed": True, "frozen": True}

    @property
    def accepts_context(self) -> bool:
        return _accepts_context(self.fn)

    async def run(self, state: Mapping[str, Any], ctx: "NodeContext") -> Any:
        """Call the node function, awaiting it if it is a coroutine."""
        if self.accepts_context:
            result = self.fn(state, ctx)
        else:
            result = self.fn(state)
        if inspect.isawaitable(result):
            result = await result
        return result


@dataclass
class NodeContext:
    """Everything a node may use besides the state snapshot."""

    run_id: str
    graph_id: str
    node_name: str
    step_index: int
    interrupt: "InterruptController"
    config: "RunConfig"
    services: Mapping[str, Any] = field(default_factory=dict)

    def service(self, name: str) -> Any:
        """Look up an injected collaborator, failing loudly if the host forgot it."""
        try:
            return self.services[name]
        except KeyError:
            raise LookupError(
                f"Node '{self.node_name}' needs service '{name}', which was not provided. "
                f"Available: {sorted(self.services)}"
            ) from None
