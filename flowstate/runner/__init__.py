"""Tool registration for graph nodes."""

from flowstate.runner.tool_registry import RegisteredTool, ToolRegistry, tool

__all__ = ["ToolRegistry", "RegisteredTool", "tool"]
