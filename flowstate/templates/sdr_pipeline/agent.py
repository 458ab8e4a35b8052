"""Agent graph construction for the SDR Pipeline agent."""

from typing import Literal

from flowstate.config import RunConfig
from flowstate.graph import END, Channel, CompiledGraph, StateGraph
from flowstate.graph.executor import ExecutionResult
from flowstate.llm import LiteLLMProvider, LLMProvider, MockLLMProvider

from .config import DEMO_ACCOUNTS, default_config, metadata
from .ledger import CreditLedger
from .nodes import billing_check, draft_email, finalize_error, identify_prospect, scrape_company

channels = [
    Channel("user_id"),
    Channel("target_url"),
    Channel("company_info"),
    Channel("decision_maker"),
    Channel("email_draft"),
    Channel("error"),
]


def route_billing(state) -> Literal["finalize_error", "scrape_company"]:
    return "finalize_error" if state["error"] else "scrape_company"


def build_graph(config: RunConfig | None = None) -> CompiledGraph:
    graph = StateGraph(channels, graph_id="sdr-pipeline")
    graph.add_node("billing_check", billing_check, description="Charge credits")
    graph.add_node("scrape_company", scrape_company)
    graph.add_node("identify_prospect", identify_prospect)
    graph.add_node("draft_email", draft_email)
    graph.add_node("finalize_error", finalize_error)

    graph.set_entry_point("billing_check")
    graph.add_conditional_edges("billing_check", route_billing, ["finalize_error", "scrape_company"])
    graph.add_edge("scrape_company", "identify_prospect")
    graph.add_edge("identify_prospect", "draft_email")
    graph.add_edge("draft_email", END)
    graph.add_edge("finalize_error", END)
    return graph.compile(config)


def mock_writer(messages, system) -> str:
    if system.startswith("Extract the CEO"):
        return "CEO: Jane Doe. Hook: sailing, and squeezing waste out of every route."
    return (
        "Subject: Smooth sailing for your pipeline\n\n"
        "Hi Jane, efficiency is clearly your thing, on the water and in logistics. "
        "Agent0 Sales Tool automates outbound the way your widgets automate supply chains. "
        "Worth a 15 minute call?"
    )


class SDRPipelineAgent:
    """
    AutoSDR - billing gate, then scrape -> identify prospect -> draft email.

    The ledger is shared across runs of one agent so credits really run out.
    """

    def __init__(self, config=None, ledger: CreditLedger | None = None):
        self.config = config or default_config
        self.ledger = ledger or CreditLedger(DEMO_ACCOUNTS)
        self._graph: CompiledGraph | None = None

    @property
    def graph(self) -> CompiledGraph:
        if self._graph is None:
            self._graph = build_graph()
        return self._graph

    def _llm(self, mock_mode: bool) -> LLMProvider:
        if mock_mode:
            return MockLLMProvider(mock_writer)
        return LiteLLMProvider(
            model=self.config.model,
            api_key=self.config.api_key,
            api_base=self.config.api_base,
        )

    async def run(
        self,
        user_id: str,
        target_url: str,
        *,
        mock_mode: bool = False,
        llm: LLMProvider | None = None,
    ) -> ExecutionResult:
        services = {"ledger": self.ledger, "llm": llm or self._llm(mock_mode)}
        return await self.graph.invoke(
            {"user_id": user_id, "target_url": target_url},
            services=services,
        )

    def info(self):
        """Get agent information."""
        return {
            "name": metadata.name,
            "version": metadata.version,
            "description": metadata.description,
            "nodes": self.graph.node_names,
            "entry_node": self.graph.entry_point,
        }


default_agent = SDRPipelineAgent()
