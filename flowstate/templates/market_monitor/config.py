"""Runtime configuration for the Market Monitor agent."""

from dataclasses import dataclass

from flowstate.config import RuntimeConfig

default_config = RuntimeConfig()

# In real life this is an RSS feed, a websocket or a database poll
MOCK_NEWS_FEED = [
    {"id": 1, "content": "Bitcoin is stable at $60k", "urgent": False},
    {"id": 2, "content": "New cat video trending on YouTube", "urgent": False},
    {"id": 3, "content": "CRITICAL: Market crash! Bitcoin drops to $20k!", "urgent": True},
    {"id": 4, "content": "Just kidding, it was a glitch.", "urgent": False},
    {"id": 5, "content": "Ethereum upgrade completed successfully", "urgent": False},
    {"id": 6, "content": "BREAKING: Major exchange hacked, funds at risk!", "urgent": True},
    {"id": 7, "content": "New meme coin launches, up 1000%", "urgent": False},
    {"id": 8, "content": "Fed announces interest rate decision", "urgent": False},
]


@dataclass
class AgentMetadata:
    name: str = "Market Monitor"
    version: str = "1.0.0"
    description: str = (
        "Ambient agent that polls a news feed in the background and only interrupts "
        "you when the model judges an item URGENT."
    )


metadata = AgentMetadata()
