"""Policy tools for the Expense Approval agent."""

import logging

from flowstate.runner.tool_registry import ToolRegistry, tool

logger = logging.getLogger(__name__)

DISALLOWED_CATEGORIES = {"Alcohol": "No alcohol on weekdays."}
CATEGORY_LIMITS = {"Electronics": 500}
DEFAULT_LIMIT = 1000


@tool(description="Checks company policy for a given expense category.")
def check_policy(category: str) -> dict:
    logger.info(f"  [Tool] Consulting policy handbook for '{category}'...")
    if category in DISALLOWED_CATEGORIES:
        return {"allowed": False, "reason": DISALLOWED_CATEGORIES[category]}
    return {"allowed": True, "limit": CATEGORY_LIMITS.get(category, DEFAULT_LIMIT)}


def build_tool_registry() -> ToolRegistry:
    registry = ToolRegistry()
    registry.register_function(check_policy)
    return registry
