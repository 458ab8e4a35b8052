"""LLM provider abstraction."""

from flowstate.llm.litellm import LiteLLMProvider
from flowstate.llm.mock import MockLLMProvider
from flowstate.llm.provider import LLMProvider, LLMResponse, Tool

__all__ = [
    "LLMProvider",
    "LLMResponse",
    "Tool",
    "LiteLLMProvider",
    "MockLLMProvider",
]
