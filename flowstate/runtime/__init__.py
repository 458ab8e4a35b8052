"""Runtime services shared by runs: the event bus and pollable event sources."""

from flowstate.runtime.event_bus import EventBus, EventType, RunEvent, Subscription
from flowstate.runtime.feed import EventSource, ReplayFeed

__all__ = [
    "EventBus",
    "EventType",
    "RunEvent",
    "Subscription",
    "EventSource",
    "ReplayFeed",
]
