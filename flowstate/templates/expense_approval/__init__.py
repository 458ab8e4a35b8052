"""
Expense Approval Agent - route expense reports by policy and amount.

Classifies a free-text expense, checks it against the policy handbook and
sends it to auto-approval, manager approval or rejection.
"""

from .agent import ExpenseApprovalAgent, build_graph, channels, default_agent, route_after_policy
from .config import AgentMetadata, default_config, metadata

__version__ = "1.0.0"

__all__ = [
    "ExpenseApprovalAgent",
    "build_graph",
    "channels",
    "default_agent",
    "route_after_policy",
    "AgentMetadata",
    "default_config",
    "metadata",
]
