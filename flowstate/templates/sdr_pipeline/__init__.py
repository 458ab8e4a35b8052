"""
SDR Pipeline Agent ("AutoSDR") - a metered B2B pipeline.

Checks the user's credit balance, then turns a company URL into a
personalized cold email for its CEO.
"""

from .agent import SDRPipelineAgent, build_graph, channels, default_agent, route_billing
from .config import COST_PER_RUN, AgentMetadata, default_config, metadata
from .ledger import Account, CreditLedger

__version__ = "1.0.0"

__all__ = [
    "SDRPipelineAgent",
    "build_graph",
    "channels",
    "default_agent",
    "route_billing",
    "COST_PER_RUN",
    "Account",
    "CreditLedger",
    "AgentMetadata",
    "default_config",
    "metadata",
]
