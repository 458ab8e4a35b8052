"""Agent graph construction for the Expense Approval agent."""

import json
import re
from typing import Literal

from flowstate.config import RunConfig
from flowstate.graph import END, Channel, CompiledGraph, StateGraph, append
from flowstate.graph.executor import ExecutionResult
from flowstate.graph.hitl import ApprovalGate, AutoApprover
from flowstate.graph.interrupt import InterruptController
from flowstate.llm import LiteLLMProvider, LLMProvider, MockLLMProvider

from .config import AUTO_APPROVE_LIMIT, AUTO_REJECT_ABOVE, default_config, metadata
from .nodes import (
    auto_approve,
    auto_reject_high_value,
    finalize,
    human_approval,
    initial_review,
    policy_check,
)
from .tools import build_tool_registry

channels = [
    Channel("expense_details"),
    Channel("classification"),
    Channel("amount_usd", default=0),
    Channel("risk_score", default=0),
    Channel("logs", reducer=append, default_factory=list),
    Channel("status", default="PENDING"),  # PENDING, APPROVED, REJECTED
]

PolicyRoute = Literal["finalize", "auto_reject_high_value", "human_approval", "auto_approve"]


def route_after_policy(state) -> PolicyRoute:
    if state["status"] == "REJECTED":
        return "finalize"
    amount = state["amount_usd"] or 0
    if amount > AUTO_REJECT_ABOVE:
        return "auto_reject_high_value"
    if amount > AUTO_APPROVE_LIMIT:
        return "human_approval"
    return "auto_approve"


def build_graph(config: RunConfig | None = None) -> CompiledGraph:
    graph = StateGraph(channels, graph_id="expense-approval")
    graph.add_node("initial_review", initial_review, description="Classify and extract amount")
    graph.add_node("policy_check", policy_check, description="Consult the policy handbook")
    graph.add_node("human_approval", human_approval, description="Wait for a manager")
    graph.add_node("auto_approve", auto_approve)
    graph.add_node("auto_reject_high_value", auto_reject_high_value)
    graph.add_node("finalize", finalize)

    graph.set_entry_point("initial_review")
    graph.add_edge("initial_review", "policy_check")
    graph.add_conditional_edges(
        "policy_check",
        route_after_policy,
        ["finalize", "auto_reject_high_value", "human_approval", "auto_approve"],
    )
    graph.add_edge("human_approval", "finalize")
    graph.add_edge("auto_approve", "finalize")
    graph.add_edge("auto_reject_high_value", "finalize")
    graph.add_edge("finalize", END)
    return graph.compile(config)


_MOCK_CATEGORIES = [
    (("beer", "wine", "alcohol"), "Alcohol"),
    (("laptop", "macbook", "monitor", "phone"), "Electronics"),
    (("coffee", "dinner", "lunch", "steakhouse"), "Meals"),
    (("taxi", "uber", "flight", "train"), "Travel"),
]


def mock_extraction(messages, system) -> str:
    """Offline stand-in for the classifier: keyword category and the first $ amount."""
    text = messages[-1]["content"].lower()
    category = next((c for words, c in _MOCK_CATEGORIES if any(w in text for w in words)), "Other")
    match = re.search(r"\$\s*(\d+(?:\.\d+)?)", text)
    amount = float(match.group(1)) if match else 0.0
    risk = 8 if amount > AUTO_REJECT_ABOVE else 2
    return json.dumps({"category": category, "amount": amount, "risk_score": risk})


class ExpenseApprovalAgent:
    """
    Expense Approval Agent - classify, check policy, route by amount.

    Flow: initial_review -> policy_check -> (finalize | auto_approve |
    human_approval | auto_reject_high_value) -> finalize
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
            return MockLLMProvider(mock_extraction)
        return LiteLLMProvider(
            model=self.config.model,
            api_key=self.config.api_key,
            api_base=self.config.api_base,
        )

    async def run(
        self,
        expense_details: str,
        *,
        mock_mode: bool = False,
        llm: LLMProvider | None = None,
        approvals: ApprovalGate | None = None,
        interrupt: InterruptController | None = None,
    ) -> ExecutionResult:
        """Process one expense report."""
        services = {
            "llm": llm or self._llm(mock_mode),
            "tools": build_tool_registry(),
            "approvals": approvals or AutoApprover(),
        }
        return await self.graph.invoke(
            {"expense_details": expense_details},
            services=services,
            interrupt=interrupt,
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


default_agent = ExpenseApprovalAgent()
