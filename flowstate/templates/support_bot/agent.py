"""Agent graph construction for the Support Bot agent."""

from flowstate.config import RunConfig
from flowstate.graph import END, Channel, CompiledGraph, StateGraph
from flowstate.graph.executor import ExecutionResult
from flowstate.llm import LiteLLMProvider, LLMProvider, MockLLMProvider

from .config import DEFAULT_DOCS, default_config, metadata
from .knowledge_base import KnowledgeBase
from .nodes import generate, retrieve

channels = [
    Channel("question"),
    Channel("retrieved_docs", default_factory=list),
    Channel("answer"),
]


def build_graph(config: RunConfig | None = None) -> CompiledGraph:
    graph = StateGraph(channels, graph_id="support-bot")
    graph.add_node("retrieve", retrieve, description="Keyword search over the docs")
    graph.add_node("generate", generate, description="Answer from retrieved docs only")
    graph.set_entry_point("retrieve")
    graph.add_edge("retrieve", "generate")
    graph.add_edge("generate", END)
    return graph.compile(config)


def mock_answer(messages, system) -> str:
    """Offline stand-in: echo the first retrieved doc, or admit ignorance."""
    context = messages[-1]["content"].split("\n\nQuestion:")[0]
    first = context.removeprefix("Context:\n").split("\n")[0].removeprefix("- ")
    if not first or first.startswith("No relevant documentation"):
        return "I don't know"
    return first


class SupportBotAgent:
    """Support Bot - retrieve -> generate over a KnowledgeBase."""

    def __init__(self, config=None, knowledge_base: KnowledgeBase | None = None):
        self.config = config or default_config
        self.knowledge_base = knowledge_base or KnowledgeBase(DEFAULT_DOCS)
        self._graph: CompiledGraph | None = None

    @property
    def graph(self) -> CompiledGraph:
        if self._graph is None:
            self._graph = build_graph()
        return self._graph

    def _llm(self, mock_mode: bool) -> LLMProvider:
        if mock_mode:
            return MockLLMProvider(mock_answer)
        return LiteLLMProvider(
            model=self.config.model,
            api_key=self.config.api_key,
            api_base=self.config.api_base,
        )

    async def run(
        self,
        question: str,
        *,
        mock_mode: bool = False,
        llm: LLMProvider | None = None,
    ) -> ExecutionResult:
        services = {"knowledge_base": self.knowledge_base, "llm": llm or self._llm(mock_mode)}
        return await self.graph.invoke({"question": question}, services=services)

    def info(self):
        """Get agent information."""
        return {
            "name": metadata.name,
            "version": metadata.version,
            "description": metadata.description,
            "nodes": self.graph.node_names,
            "entry_node": self.graph.entry_point,
        }


default_agent = SupportBotAgent()
