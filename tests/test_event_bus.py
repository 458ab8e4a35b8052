"""Tests for the EventBus and executor event emission."""

import pytest

from flowstate.config import RunConfig
from flowstate.graph import END, Channel, StateGraph
from flowstate.runtime.event_bus import EventBus, EventType, RunEvent


@pytest.mark.asyncio
async def test_subscribers_receive_matching_events_only():
    bus = EventBus()
    received = []

    async def handler(event):
        received.append(event)

    bus.subscribe([EventType.NODE_COMPLETED], handler, filter_node="a")

    await bus.emit(EventType.NODE_COMPLETED, run_id="r1", node_id="a")
    await bus.emit(EventType.NODE_COMPLETED, run_id="r1", node_id="b")
    await bus.emit(EventType.NODE_STARTED, run_id="r1", node_id="a")

    assert [e.node_id for e in received] == ["a"]
    assert len(bus.get_history()) == 3


@pytest.mark.asyncio
async def test_handler_errors_do_not_propagate():
    bus = EventBus()

    async def broken(event):
        raise RuntimeError("handler bug")

    bus.subscribe([EventType.CUSTOM], broken)
    await bus.emit(EventType.CUSTOM, run_id="r1")


@pytest.mark.asyncio
async def test_history_is_bounded_and_filterable():
    bus = EventBus(max_history=3)
    for i in range(5):
        await bus.publish(RunEvent(type=EventType.CUSTOM, run_id=f"r{i}"))

    assert [e.run_id for e in bus.get_history()] == ["r2", "r3", "r4"]
    assert [e.run_id for e in bus.get_history(run_id="r3")] == ["r3"]
    assert len(bus.get_history(limit=1)) == 1


def test_unsubscribe():
    bus = EventBus()

    async def handler(event):
        pass

    sub_id = bus.subscribe([EventType.CUSTOM], handler)
    assert bus.unsubscribe(sub_id) is True
    assert bus.unsubscribe(sub_id) is False


@pytest.mark.asyncio
async def test_executor_emits_run_lifecycle():
    graph = StateGraph([Channel("x")], graph_id="events")
    graph.add_node("a", lambda s: {"x": 1})
    graph.add_node("b", lambda s: {})
    graph.set_entry_point("a")
    graph.add_edge("a", "b")
    graph.add_edge("b", END)
    compiled = graph.compile(RunConfig(max_steps=10, poll_interval=0.01, node_timeout=None))

    bus = EventBus()
    result = await compiled.invoke(event_bus=bus, run_id="run-1")

    types = [e.type for e in bus.get_history(run_id="run-1")]
    assert types == [
        EventType.RUN_STARTED,
        EventType.NODE_STARTED,
        EventType.NODE_COMPLETED,
        EventType.EDGE_TRAVERSED,
        EventType.NODE_STARTED,
        EventType.NODE_COMPLETED,
        EventType.RUN_COMPLETED,
    ]
    assert result.run_id == "run-1"
    edge = bus.get_history(event_type=EventType.EDGE_TRAVERSED)[0]
    assert edge.data == {"source": "a", "target": "b"}
    assert edge.to_dict()["graph_id"] == "events"


@pytest.mark.asyncio
async def test_executor_emits_failure_events():
    def explode(state):
        raise ValueError("nope")

    graph = StateGraph([Channel("x")])
    graph.add_node("a", explode)
    graph.set_entry_point("a")
    graph.add_edge("a", END)

    bus = EventBus()
    await graph.compile(RunConfig(max_steps=10, poll_interval=0.01, node_timeout=None)).invoke(
        event_bus=bus
    )

    types = [e.type for e in bus.get_history()]
    assert types[-2:] == [EventType.NODE_FAILED, EventType.RUN_FAILED]
