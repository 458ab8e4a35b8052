"""Tool registration and invocation for graph nodes."""

import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from flowstate.llm.provider import Tool

logger = logging.getLogger(__name__)

_JSON_TYPES = {int: "integer", float: "number", bool: "boolean", dict: "object", list: "array"}


@dataclass
class RegisteredTool:
    """A tool with its executor function."""

    tool: Tool
    executor: Callable[[dict], Any]


class ToolRegistry:
    """
    Named tools a node can call with a dict of arguments.

    Example:
        registry = ToolRegistry()
        registry.register_function(check_policy)
        verdict = await registry.call("check_policy", {"category": "Meals", "amount": 12.0})

    Executors may be sync or async; async results are awaited.
    """

    def __init__(self):
        self._tools: dict[str, RegisteredTool] = {}

    def register(
        self,
        name: str,
        tool: Tool,
        executor: Callable[[dict], Any],
    ) -> None:
        """
        Register a single tool with its executor.

        Args:
            name: Tool name (must match tool.name)
            tool: Tool definition
            executor: Function that takes tool input dict and returns result
        """
        if name != tool.name:
            raise ValueError(f"Tool name '{name}' does not match definition '{tool.name}'")
        self._tools[name] = RegisteredTool(tool=tool, executor=executor)

    def register_function(
        self,
        func: Callable,
        name: str | None = None,
        description: str | None = None,
    ) -> None:
        """
        Register a function as a tool, generating the Tool definition from
        its signature. Honors metadata left by the ``@tool`` decorator.
        """
        metadata = getattr(func, "_tool_metadata", {})
        tool_name = name or metadata.get("name") or func.__name__
        tool_desc = description or metadata.get("description") or func.__doc__ or f"Execute {tool_name}"

        sig = inspect.signature(func)
        properties = {}
        required = []
        for param_name, param in sig.parameters.items():
            if param_name in ("self", "cls"):
                continue
            param_type = _JSON_TYPES.get(param.annotation, "string")
            properties[param_name] = {"type": param_type}
            if param.default == inspect.Parameter.empty:
                required.append(param_name)

        tool = Tool(
            name=tool_name,
            description=tool_desc.strip(),
            parameters={"type": "object", "properties": properties, "required": required},
        )

        def executor(inputs: dict) -> Any:
            return func(**inputs)

        self.register(tool_name, tool, executor)

    async def call(self, name: str, args: dict[str, Any] | None = None) -> Any:
        """
        Run a tool and return its result.

        Raises:
            KeyError: no tool named ``name``
            Exception: whatever the tool raises; the calling node decides
                whether that fails the run
        """
        registered = self._tools.get(name)
        if registered is None:
            raise KeyError(f"Unknown tool '{name}'. Registered: {sorted(self._tools)}")

        logger.info(f"🔧 Tool call: {name}({args or {}})")
        result = registered.executor(dict(args or {}))
        if inspect.isawaitable(result):
            result = await result
        logger.debug(f"   Tool {name} returned {result!r}")
        return result

    def get_tools(self) -> dict[str, Tool]:
        return {name: registered.tool for name, registered in self._tools.items()}

    def get_registered_names(self) -> list[str]:
        return list(self._tools)

    def has_tool(self, name: str) -> bool:
        return name in self._tools


def tool(
    description: str | None = None,
    name: str | None = None,
) -> Callable:
    """
    Decorator to mark a function as a tool.

    Usage:
        @tool(description="Check an expense against company policy")
        def check_policy(category: str, amount: float) -> dict:
            ...
    """

    def decorator(func: Callable) -> Callable:
        func._tool_metadata = {
            "name": name or func.__name__,
            "description": description or func.__doc__,
        }
        return func

    return decorator
