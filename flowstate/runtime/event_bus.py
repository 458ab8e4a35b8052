"""
Event Bus - Pub/sub for run lifecycle events.

The executor publishes what happens during a run (node started, edge
traversed, run cancelled, ...) so hosts can observe runs without wrapping
node functions. Publishing is optional: with no bus, the executor only logs.

Handler failures are logged and never reach the run that published.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)


class EventType(StrEnum):
    """Types of events published during a run."""

    # Run lifecycle
    RUN_STARTED = "run_started"
    RUN_COMPLETED = "run_completed"
    RUN_FAILED = "run_failed"
    RUN_CANCELLED = "run_cancelled"

    # Steps
    NODE_STARTED = "node_started"
    NODE_COMPLETED = "node_completed"
    NODE_FAILED = "node_failed"
    EDGE_TRAVERSED = "edge_traversed"

    # Anything a node wants to announce (alerts, approvals)
    CUSTOM = "custom"


@dataclass
class RunEvent:
    """An event published by a run."""

    type: EventType
    run_id: str
    graph_id: str = ""
    node_id: str | None = None
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "run_id": self.run_id,
            "graph_id": self.graph_id,
            "node_id": self.node_id,
            "data": self.data,
            "timestamp": self.timestamp.isoformat(),
        }


EventHandler = Callable[[RunEvent], Awaitable[None]]


@dataclass
class Subscription:
    """A subscription to events."""

    id: str
    event_types: set[EventType]
    handler: EventHandler
    filter_run: str | None = None  # Only events from this run
    filter_node: str | None = None  # Only events about this node


class EventBus:
    """
    Async pub/sub bus with bounded history.

    Example:
        bus = EventBus()

        async def on_step(event: RunEvent):
            print(event.node_id, event.data)

        bus.subscribe([EventType.NODE_COMPLETED], on_step)
        result = await graph.invoke(state, event_bus=bus)
    """

    def __init__(self, max_history: int = 1000):
        self._subscriptions: dict[str, Subscription] = {}
        self._history: list[RunEvent] = []
        self._max_history = max_history
        self._subscription_counter = 0

    def subscribe(
        self,
        event_types: list[EventType],
        handler: EventHandler,
        filter_run: str | None = None,
        filter_node: str | None = None,
    ) -> str:
        """
        Subscribe to events.

        Returns:
            Subscription ID (use to unsubscribe)
        """
        self._subscription_counter += 1
        sub_id = f"sub_{self._subscription_counter}"
        self._subscriptions[sub_id] = Subscription(
            id=sub_id,
            event_types=set(event_types),
            handler=handler,
            filter_run=filter_run,
            filter_node=filter_node,
        )
        logger.debug(f"Subscription {sub_id} registered for {event_types}")
        return sub_id

    def unsubscribe(self, subscription_id: str) -> bool:
        return self._subscriptions.pop(subscription_id, None) is not None

    async def publish(self, event: RunEvent) -> None:
        """Record ``event`` and deliver it to every matching subscriber."""
        self._history.append(event)
        if len(self._history) > self._max_history:
            self._history = self._history[-self._max_history :]

        handlers = [s.handler for s in self._subscriptions.values() if self._matches(s, event)]
        if not handlers:
            return

        async def run_handler(handler: EventHandler) -> None:
            try:
                await handler(event)
            except Exception as e:
                logger.error(f"Handler error for {event.type}: {e}")

        await asyncio.gather(*(run_handler(h) for h in handlers))

    def _matches(self, subscription: Subscription, event: RunEvent) -> bool:
        if event.type not in subscription.event_types:
            return False
        if subscription.filter_run and subscription.filter_run != event.run_id:
            return False
        if subscription.filter_node and subscription.filter_node != event.node_id:
            return False
        return True

    def get_history(
        self,
        event_type: EventType | None = None,
        run_id: str | None = None,
        limit: int | None = None,
    ) -> list[RunEvent]:
        """Recorded events, oldest first, optionally filtered."""
        events = [
            e
            for e in self._history
            if (event_type is None or e.type == event_type) and (run_id is None or e.run_id == run_id)
        ]
        return events[-limit:] if limit else events

    def clear_history(self) -> None:
        self._history.clear()

    # === CONVENIENCE PUBLISHERS ===

    async def emit(
        self,
        event_type: EventType,
        run_id: str,
        graph_id: str = "",
        node_id: str | None = None,
        **data: Any,
    ) -> None:
        await self.publish(
            RunEvent(type=event_type, run_id=run_id, graph_id=graph_id, node_id=node_id, data=data)
        )
