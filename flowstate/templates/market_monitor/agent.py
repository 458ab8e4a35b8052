"""Agent graph construction for the Market Monitor agent."""

import logging
from typing import Literal

from flowstate.config import RunConfig
from flowstate.graph import END, Channel, CompiledGraph, StateGraph, append
from flowstate.graph.executor import ExecutionResult
from flowstate.graph.interrupt import InterruptController
from flowstate.llm import LiteLLMProvider, LLMProvider, MockLLMProvider
from flowstate.runtime.feed import EventSource, ReplayFeed

from .config import MOCK_NEWS_FEED, default_config, metadata
from .nodes import alert_user, analyze_importance, check_feed

logger = logging.getLogger(__name__)

channels = [
    Channel("last_checked_id", default=0),
    Channel("latest_news"),
    Channel("has_new_item", default=False),
    Channel("analysis"),
    Channel("should_alert", default=False),
    Channel("should_stop", default=False),
    Channel("alerts", reducer=append, default_factory=list),
]


def route_feed_check(state) -> Literal["__end__", "check_feed", "analyze_importance"]:
    if state["should_stop"]:
        logger.info("  > Agent stopping.")
        return END
    if not state["has_new_item"]:
        return "check_feed"
    return "analyze_importance"


def route_after_analysis(state) -> Literal["alert_user", "check_feed"]:
    return "alert_user" if state["should_alert"] else "check_feed"


def build_graph(config: RunConfig | None = None) -> CompiledGraph:
    graph = StateGraph(channels, graph_id="market-monitor")
    graph.add_node("check_feed", check_feed, description="Sleep, then poll the feed")
    graph.add_node("analyze_importance", analyze_importance, description="URGENT or IGNORE")
    graph.add_node("alert_user", alert_user, description="Interrupt the user")

    graph.set_entry_point("check_feed")
    graph.add_conditional_edges(
        "check_feed",
        route_feed_check,
        {"analyze_importance": "analyze_importance", "check_feed": "check_feed", END: END},
    )
    graph.add_conditional_edges(
        "analyze_importance",
        route_after_analysis,
        {"alert_user": "alert_user", "check_feed": "check_feed"},
    )
    graph.add_edge("alert_user", "check_feed")
    return graph.compile(config)


class ConsoleNotifier:
    """Pushes alerts to the log and keeps them for inspection."""

    def __init__(self) -> None:
        self.sent: list[str] = []

    async def notify(self, message: str) -> None:
        self.sent.append(message)
        logger.warning("!!! INTERRUPT: IMPORTANT MESSAGE !!!")
        logger.warning(f"AGENT: \"{message}\"")


def mock_triage(messages, system) -> str:
    """Offline stand-in for the model: headlines shouting CRITICAL/BREAKING are urgent."""
    text = messages[-1]["content"]
    return "URGENT" if any(word in text for word in ("CRITICAL", "BREAKING")) else "IGNORE"


class MarketMonitorAgent:
    """
    Market Monitor Agent - an ambient loop over a news feed.

    Flow: check_feed -> analyze_importance -> [alert_user] -> check_feed,
    until cancelled or, in demo mode, until the feed is exhausted.
    """

    def __init__(self, config=None, run_config: RunConfig | None = None):
        self.config = config or default_config
        self.run_config = run_config
        self._graph: CompiledGraph | None = None

    @property
    def graph(self) -> CompiledGraph:
        if self._graph is None:
            self._graph = build_graph(self.run_config)
        return self._graph

    def _llm(self, mock_mode: bool) -> LLMProvider:
        if mock_mode:
            return MockLLMProvider(mock_triage)
        return LiteLLMProvider(
            model=self.config.model,
            api_key=self.config.api_key,
            api_base=self.config.api_base,
        )

    async def run(
        self,
        *,
        mock_mode: bool = False,
        feed: EventSource | None = None,
        llm: LLMProvider | None = None,
        notifier: ConsoleNotifier | None = None,
        interrupt: InterruptController | None = None,
        run_config: RunConfig | None = None,
    ) -> ExecutionResult:
        """Monitor until the run is cancelled or the demo feed runs out."""
        run_config = run_config or self.graph.config
        if feed is None:
            feed = ReplayFeed(MOCK_NEWS_FEED, cycle=not run_config.demo_mode)
        services = {
            "feed": feed,
            "llm": llm or self._llm(mock_mode),
            "notifier": notifier or ConsoleNotifier(),
        }
        return await self.graph.invoke({}, services=services, interrupt=interrupt, config=run_config)

    def info(self):
        """Get agent information."""
        return {
            "name": metadata.name,
            "version": metadata.version,
            "description": metadata.description,
            "nodes": self.graph.node_names,
            "entry_node": self.graph.entry_point,
        }


default_agent = MarketMonitorAgent()
