"""Runtime configuration for the Expense Approval agent."""

from dataclasses import dataclass

from flowstate.config import RuntimeConfig

default_config = RuntimeConfig()

# Routing thresholds, in USD
AUTO_APPROVE_LIMIT = 50
AUTO_REJECT_ABOVE = 1000


@dataclass
class AgentMetadata:
    name: str = "Expense Approval"
    version: str = "1.0.0"
    description: str = (
        "Classify an expense report, check it against company policy, and route it "
        "to auto-approval, manager approval or rejection depending on policy and amount."
    )


metadata = AgentMetadata()
