"""LLM Provider abstraction for pluggable LLM backends."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class LLMResponse:
    """Response from an LLM call."""

    content: str
    model: str
    input_tokens: int = 0
    output_tokens: int = 0
    stop_reason: str = ""
    raw_response: Any = None


@dataclass
class Tool:
    """A tool a node can call through the ToolRegistry."""

    name: str
    description: str
    parameters: dict[str, Any] = field(default_factory=dict)


class LLMProvider(ABC):
    """
    Abstract LLM provider - plug in any LLM backend.

    Nodes receive a provider as the ``llm`` service. Calls are fallible and
    never retried by the executor; a node either lets the error fail the run
    or turns it into a degraded update.
    """

    @abstractmethod
    async def acomplete(
        self,
        messages: list[dict[str, Any]],
        system: str = "",
        max_tokens: int = 1024,
        json_mode: bool = False,
    ) -> LLMResponse:
        """
        Generate a completion from the LLM.

        Args:
            messages: Conversation history [{role: "user"|"assistant", content: str}]
            system: System prompt
            max_tokens: Maximum tokens to generate
            json_mode: If True, ask the backend for a JSON object

        Returns:
            LLMResponse with content and metadata
        """
