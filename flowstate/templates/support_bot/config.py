"""Runtime configuration for the Support Bot agent."""

from dataclasses import dataclass

from flowstate.config import RuntimeConfig

default_config = RuntimeConfig()

DEFAULT_DOCS = [
    {"id": 1, "text": "The API rate limit is 1000 requests per minute for Pro users."},
    {"id": 2, "text": "To reset your API key, go to Settings > Security > Rotate Keys."},
    {"id": 3, "text": "Error 500 means the server is down. Check status.supercloud.com."},
    {"id": 4, "text": "The SDK supports Python 3.8+ and Node.js 14+."},
]


@dataclass
class AgentMetadata:
    name: str = "Support Bot"
    version: str = "1.0.0"
    description: str = (
        "Technical support for the SuperCloud API: retrieve matching docs, then answer "
        "from those docs only."
    )


metadata = AgentMetadata()
