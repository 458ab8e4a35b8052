"""
Market Monitor Agent - an ambient, event-driven background loop.

Unlike a chatbot it is never asked anything: it polls a feed on a timer and
only speaks up when an item is worth interrupting for.
"""

from .agent import (
    ConsoleNotifier,
    MarketMonitorAgent,
    build_graph,
    channels,
    default_agent,
    route_after_analysis,
    route_feed_check,
)
from .config import MOCK_NEWS_FEED, AgentMetadata, default_config, metadata

__version__ = "1.0.0"

__all__ = [
    "MarketMonitorAgent",
    "ConsoleNotifier",
    "build_graph",
    "channels",
    "default_agent",
    "route_feed_check",
    "route_after_analysis",
    "MOCK_NEWS_FEED",
    "AgentMetadata",
    "default_config",
    "metadata",
]
