"""Tests for ToolRegistry."""

import pytest

from flowstate.llm.provider import Tool
from flowstate.runner.tool_registry import ToolRegistry, tool


@tool(description="Add two numbers")
def add(a: int, b: int = 0) -> int:
    return a + b


async def shout(text: str) -> str:
    """Upper-case the text."""
    return text.upper()


@pytest.mark.asyncio
async def test_register_function_builds_schema_and_calls():
    registry = ToolRegistry()
    registry.register_function(add)

    definition = registry.get_tools()["add"]
    assert definition.description == "Add two numbers"
    assert definition.parameters["properties"] == {"a": {"type": "integer"}, "b": {"type": "integer"}}
    assert definition.parameters["required"] == ["a"]
    assert await registry.call("add", {"a": 2, "b": 3}) == 5


@pytest.mark.asyncio
async def test_async_executors_are_awaited():
    registry = ToolRegistry()
    registry.register_function(shout)
    assert await registry.call("shout", {"text": "hi"}) == "HI"
    assert registry.get_tools()["shout"].description == "Upper-case the text."


@pytest.mark.asyncio
async def test_unknown_tool_raises_key_error():
    registry = ToolRegistry()
    with pytest.raises(KeyError, match="check_policy"):
        await registry.call("check_policy", {})


def test_register_requires_matching_name():
    registry = ToolRegistry()
    with pytest.raises(ValueError):
        registry.register("a", Tool(name="b", description=""), lambda args: None)
    registry.register("b", Tool(name="b", description=""), lambda args: None)
    assert registry.has_tool("b")
    assert registry.get_registered_names() == ["b"]
