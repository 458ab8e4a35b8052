"""Runtime configuration for the SDR Pipeline agent."""

from dataclasses import dataclass

from flowstate.config import RuntimeConfig

default_config = RuntimeConfig()

COST_PER_RUN = 5

DEMO_ACCOUNTS = {
    "user_123": {"credits": 10, "plan": "PRO"},
    "user_456": {"credits": 2, "plan": "FREE"},
}


@dataclass
class AgentMetadata:
    name: str = "AutoSDR"
    version: str = "1.0.0"
    description: str = (
        "Input a company URL, get a personalized cold email for its CEO. "
        "Each run is billed against the user's credit balance."
    )


metadata = AgentMetadata()
