"""Tests for Router label resolution."""

from enum import StrEnum

import pytest

from flowstate.graph.edge import END, EdgeKind, EdgeSpec
from flowstate.graph.errors import RoutingError
from flowstate.graph.router import Router


def conditional(condition, path_map, source="a"):
    return EdgeSpec(source=source, kind=EdgeKind.CONDITIONAL, condition=condition, path_map=path_map)


@pytest.mark.asyncio
async def test_static_edge_returns_fixed_target():
    router = Router({"a": EdgeSpec(source="a", target="b")})
    assert await router.route("a", {}) == ["b"]


@pytest.mark.asyncio
async def test_conditional_edge_reads_merged_state():
    edge = conditional(lambda s: "big" if s["n"] > 10 else "small", {"big": "b", "small": END})
    router = Router({"a": edge})

    assert await router.route("a", {"n": 11}) == ["b"]
    assert await router.route("a", {"n": 1}) == [END]


@pytest.mark.asyncio
async def test_async_decision_functions_are_awaited():
    async def decide(state):
        return "go"

    router = Router({"a": conditional(decide, {"go": "b"})})
    assert await router.route("a", {}) == ["b"]


@pytest.mark.asyncio
async def test_unmapped_label_is_routing_error():
    router = Router({"a": conditional(lambda s: "sideways", {"up": "b", "down": "c"})})

    with pytest.raises(RoutingError) as exc_info:
        await router.route("a", {})

    error = exc_info.value
    assert error.source == "a"
    assert error.label == "sideways"
    assert error.allowed == ["down", "up"]


@pytest.mark.asyncio
async def test_failing_decision_keeps_cause():
    def decide(state):
        raise ZeroDivisionError("boom")

    router = Router({"a": conditional(decide, {"x": "b"})})

    with pytest.raises(RoutingError) as exc_info:
        await router.route("a", {})
    assert isinstance(exc_info.value.__cause__, ZeroDivisionError)


class Lane(StrEnum):
    FAST = "fast"
    SLOW = "slow"


@pytest.mark.asyncio
async def test_enum_and_non_string_labels():
    router = Router(
        {
            "a": conditional(lambda s: Lane.SLOW, {"fast": "f", "slow": "s"}),
            "b": conditional(lambda s: s["ok"], {"True": "yes", "False": "no"}, source="b"),
        }
    )
    assert await router.route("a", {}) == ["s"]
    assert await router.route("b", {"ok": False}) == ["no"]


@pytest.mark.asyncio
async def test_multiple_labels_resolve_in_order():
    router = Router({"a": conditional(lambda s: ["x", "y"], {"x": "b", "y": "c"})})
    assert await router.route("a", {}) == ["b", "c"]


@pytest.mark.asyncio
async def test_empty_decision_and_mixed_end_are_rejected():
    empty = Router({"a": conditional(lambda s: [], {"x": "b"})})
    with pytest.raises(RoutingError, match="no label"):
        await empty.route("a", {})

    mixed = Router({"a": conditional(lambda s: ["x", "done"], {"x": "b", "done": END})})
    with pytest.raises(RoutingError, match="mixes END"):
        await mixed.route("a", {})


@pytest.mark.asyncio
async def test_node_without_rule():
    with pytest.raises(RoutingError, match="No routing rule"):
        await Router({}).route("a", {})


def test_edge_spec_shape_is_validated():
    with pytest.raises(ValueError):
        EdgeSpec(source="a")
    with pytest.raises(ValueError):
        EdgeSpec(source="a", kind=EdgeKind.CONDITIONAL, path_map={"x": "b"})
