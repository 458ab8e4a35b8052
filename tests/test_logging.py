"""Tests for trace context and log formatting."""

import json
import logging

import pytest

from flowstate.config import RunConfig
from flowstate.graph import END, Channel, StateGraph
from flowstate.observability import (
    clear_trace_context,
    get_trace_context,
    restore_trace_context,
    set_trace_context,
)
from flowstate.observability.logging import HumanReadableFormatter, StructuredFormatter


@pytest.fixture(autouse=True)
def clean_context():
    clear_trace_context()
    yield
    clear_trace_context()


def make_record(message="hello"):
    return logging.LogRecord("flowstate.test", logging.INFO, __file__, 1, message, None, None)


def test_set_and_restore_trace_context():
    set_trace_context(run_id="r1")
    saved = get_trace_context()
    set_trace_context(node_id="a")
    assert get_trace_context() == {"run_id": "r1", "node_id": "a"}

    restore_trace_context(saved)
    assert get_trace_context() == {"run_id": "r1"}


def test_structured_formatter_includes_context():
    set_trace_context(run_id="run_abc", graph_id="g", node_id="a", step=2)
    entry = json.loads(StructuredFormatter().format(make_record("\x1b[31mred\x1b[0m")))

    assert entry["message"] == "red"
    assert entry["level"] == "info"
    assert entry["run_id"] == "run_abc"
    assert entry["node_id"] == "a"
    assert entry["step"] == 2


def test_human_formatter_prefix():
    set_trace_context(run_id="run_0123456789", graph_id="g", node_id="a")
    line = HumanReadableFormatter().format(make_record())
    assert "run:23456789" in line
    assert "graph:g" in line
    assert "node:a" in line
    assert line.endswith("hello")


@pytest.mark.asyncio
async def test_nodes_log_with_run_context():
    seen = {}

    def node(state):
        seen.update(get_trace_context())
        return {}

    graph = StateGraph([Channel("x")], graph_id="ctx-graph")
    graph.add_node("only", node)
    graph.set_entry_point("only")
    graph.add_edge("only", END)
    compiled = graph.compile(RunConfig(max_steps=5, poll_interval=0.01, node_timeout=None))

    await compiled.invoke(run_id="run-ctx")

    assert seen == {"run_id": "run-ctx", "graph_id": "ctx-graph", "node_id": "only", "step": 0}
    assert get_trace_context() == {}
