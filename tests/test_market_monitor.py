"""Tests for the ambient Market Monitor loop."""

import asyncio

import pytest

from flowstate.config import RunConfig
from flowstate.graph import RunStatus
from flowstate.graph.interrupt import InterruptController
from flowstate.llm import MockLLMProvider
from flowstate.runtime import ReplayFeed
from flowstate.templates.market_monitor import (
    MOCK_NEWS_FEED,
    ConsoleNotifier,
    MarketMonitorAgent,
    route_after_analysis,
    route_feed_check,
)


def demo_config(**overrides):
    values = {"max_steps": 100, "poll_interval": 0.01, "demo_mode": True, "node_timeout": None}
    values.update(overrides)
    return RunConfig(**values)


@pytest.fixture
def agent():
    return MarketMonitorAgent()


@pytest.mark.asyncio
async def test_demo_cycle_alerts_on_urgent_items_only(agent):
    notifier = ConsoleNotifier()
    result = await agent.run(mock_mode=True, notifier=notifier, run_config=demo_config())

    assert result.status == RunStatus.COMPLETED
    assert [alert["id"] for alert in result.state["alerts"]] == [3, 6]
    assert len(notifier.sent) == 2
    assert notifier.sent[0].startswith("Boss, I found something you need to see: CRITICAL")
    assert result.path.count("analyze_importance") == len(MOCK_NEWS_FEED)
    assert result.state["last_checked_id"] == 8
    assert result.path[-1] == "check_feed"
    assert result.state["should_stop"] is True


@pytest.mark.asyncio
async def test_every_item_is_analysed_once(agent):
    llm = MockLLMProvider(lambda messages, system: "IGNORE")
    result = await agent.run(llm=llm, run_config=demo_config())

    assert result.success
    assert len(llm.calls) == len(MOCK_NEWS_FEED)
    assert result.state["alerts"] == []


@pytest.mark.asyncio
async def test_empty_feed_stops_immediately_in_demo_mode(agent):
    result = await agent.run(mock_mode=True, feed=ReplayFeed([]), run_config=demo_config())

    assert result.success
    assert result.path == ["check_feed"]


@pytest.mark.asyncio
async def test_model_errors_degrade_to_not_urgent(agent):
    llm = MockLLMProvider([RuntimeError("rate limited")])
    feed = ReplayFeed(MOCK_NEWS_FEED[:3])
    result = await agent.run(llm=llm, feed=feed, run_config=demo_config())

    assert result.success
    assert result.state["alerts"] == []
    assert result.state["analysis"] == "Error: rate limited"


@pytest.mark.asyncio
async def test_cancel_from_notifier_discards_alert_update(agent):
    interrupt = InterruptController(poll_interval=0.01)

    class CancellingNotifier(ConsoleNotifier):
        async def notify(self, message):
            await super().notify(message)
            interrupt.request_cancel("user pressed Ctrl+C")

    notifier = CancellingNotifier()
    result = await agent.run(
        mock_mode=True,
        notifier=notifier,
        interrupt=interrupt,
        run_config=demo_config(demo_mode=False),
    )

    assert result.status == RunStatus.CANCELLED
    assert result.cancel_reason == "user pressed Ctrl+C"
    assert len(notifier.sent) == 1
    # The in-flight alert_user step never merged
    assert result.state["alerts"] == []
    assert result.path[-1] == "analyze_importance"


@pytest.mark.asyncio
async def test_continuous_mode_runs_until_cancelled(agent):
    interrupt = InterruptController(poll_interval=0.01)
    task = asyncio.create_task(
        agent.run(mock_mode=True, interrupt=interrupt, run_config=demo_config(demo_mode=False, max_steps=10_000))
    )
    await asyncio.sleep(0.2)
    assert not task.done()

    interrupt.request_cancel("shutdown")
    result = await asyncio.wait_for(task, timeout=2)

    assert result.cancelled
    assert result.steps_executed > 0


@pytest.mark.asyncio
async def test_continuous_mode_respects_step_budget(agent):
    result = await agent.run(mock_mode=True, run_config=demo_config(demo_mode=False, max_steps=5))

    assert result.status == RunStatus.FAILED
    assert result.steps_executed == 5


def test_routing_functions():
    base = {"should_stop": False, "has_new_item": False}
    assert route_feed_check({**base, "should_stop": True}) == "__end__"
    assert route_feed_check(base) == "check_feed"
    assert route_feed_check({**base, "has_new_item": True}) == "analyze_importance"
    assert route_after_analysis({"should_alert": True}) == "alert_user"
    assert route_after_analysis({"should_alert": False}) == "check_feed"
