"""
Router - resolves the node(s) that run after a given node.

The router only reads: it is handed the fully merged snapshot of the step
that just finished and returns target names. It never touches the store.
"""

import inspect
import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any

from flowstate.graph.edge import END, EdgeSpec
from flowstate.graph.errors import RoutingError

logger = logging.getLogger(__name__)


def _label_key(label: Any) -> Any:
    """Normalize a decision label for path-map lookup."""
    if isinstance(label, Enum):
        label = label.value
    if isinstance(label, (str, list, tuple, dict, set)):
        return label
    # Path maps are keyed by str; bools and numbers are looked up by their text
    return str(label)


class Router:
    """
    Routes from a node to its successors.

    Example:
        router = Router(routes={"policy_check": edge, ...})
        targets = await router.route("policy_check", snapshot)
        if targets == [END]:
            ...
    """

    def __init__(self, routes: Mapping[str, EdgeSpec]):
        self._routes = dict(routes)

    def edge_for(self, node_name: str) -> EdgeSpec:
        edge = self._routes.get(node_name)
        if edge is None:
            # The compiler guarantees one rule per node; reaching this is a bug upstream
            raise RoutingError(node_name, message=f"No routing rule registered for '{node_name}'")
        return edge

    async def route(self, node_name: str, state: Mapping[str, Any]) -> list[str]:
        """
        Resolve the next targets after ``node_name``.

        Returns:
            List of target node names; ``[END]`` when the run should finish.

        Raises:
            RoutingError: the decision function failed or returned a label
                that is not in the path map.
        """
        edge = self.edge_for(node_name)

        if not edge.is_conditional:
            return [edge.target]

        try:
            decision = edge.condition(state)
            if inspect.isawaitable(decision):
                decision = await decision
        except Exception as e:
            raise RoutingError(
                node_name,
                allowed=edge.labels(),
                message=f"Decision function for '{node_name}' raised {type(e).__name__}: {e}",
            ) from e

        labels = decision if isinstance(decision, (list, tuple)) else [decision]
        if not labels:
            raise RoutingError(
                node_name,
                label=decision,
                allowed=edge.labels(),
                message=f"Decision function for '{node_name}' returned no label",
            )

        targets: list[str] = []
        for label in labels:
            key = _label_key(label)
            try:
                target = edge.path_map[key]
            except (KeyError, TypeError):
                raise RoutingError(node_name, label=label, allowed=edge.labels()) from None
            targets.append(target)

        logger.debug(f"   ↳ {node_name}: {labels} -> {targets}")

        if END in targets and len(targets) > 1:
            # Finishing and continuing at the same time has no meaning
            raise RoutingError(
                node_name,
                label=labels,
                allowed=edge.labels(),
                message=f"Decision for '{node_name}' mixes END with other targets: {targets}",
            )
        return targets
