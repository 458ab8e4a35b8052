"""Mock LLM provider for tests and offline ``--mock`` runs."""

from collections.abc import Callable, Iterable
from typing import Any

from flowstate.llm.provider import LLMProvider, LLMResponse

Responder = Callable[[list[dict[str, Any]], str], str]


class MockLLMProvider(LLMProvider):
    """
    Returns scripted responses and records every call.

    ``responses`` may be a list of strings (returned in order, the last one
    repeating) or a callable ``(messages, system) -> str``. A response that
    is an Exception instance is raised instead of returned.

    Example:
        llm = MockLLMProvider(['{"category": "Meals", "amount": 4.5, "risk_score": 1}'])
    """

    def __init__(
        self,
        responses: Iterable[str | Exception] | Responder | None = None,
        model: str = "mock-model",
    ):
        self.model = model
        self.calls: list[dict[str, Any]] = []
        if callable(responses):
            self._responder: Responder | None = responses
            self._responses: list[str | Exception] = []
        else:
            self._responder = None
            self._responses = list(responses or []) or ["OK"]

    async def acomplete(
        self,
        messages: list[dict[str, Any]],
        system: str = "",
        max_tokens: int = 1024,
        json_mode: bool = False,
    ) -> LLMResponse:
        self.calls.append({"messages": messages, "system": system, "max_tokens": max_tokens})

        if self._responder is not None:
            content: str | Exception = self._responder(messages, system)
        else:
            index = min(len(self.calls) - 1, len(self._responses) - 1)
            content = self._responses[index]

        if isinstance(content, Exception):
            raise content
        return LLMResponse(content=content, model=self.model, stop_reason="mock_complete")
