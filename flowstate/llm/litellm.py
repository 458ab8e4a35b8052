"""LiteLLM provider - one client for Anthropic, OpenAI and every other backend litellm routes to."""

import logging
from typing import Any

import litellm

from flowstate.config import RuntimeConfig
from flowstate.llm.provider import LLMProvider, LLMResponse

logger = logging.getLogger(__name__)


class LiteLLMProvider(LLMProvider):
    """
    LLM provider backed by ``litellm.acompletion``.

    Model names use litellm's "provider/model" form, e.g.
    "anthropic/claude-3-5-sonnet-20241022". API keys come from the usual
    provider environment variables unless passed explicitly.
    """

    def __init__(
        self,
        model: str | None = None,
        api_key: str | None = None,
        api_base: str | None = None,
        temperature: float | None = None,
        **extra_kwargs: Any,
    ):
        config = RuntimeConfig()
        self.model = model or config.model
        self.api_key = api_key or config.api_key
        self.api_base = api_base or config.api_base
        self.temperature = config.temperature if temperature is None else temperature
        self.extra_kwargs = extra_kwargs

    async def acomplete(
        self,
        messages: list[dict[str, Any]],
        system: str = "",
        max_tokens: int = 1024,
        json_mode: bool = False,
    ) -> LLMResponse:
        full_messages = [{"role": "system", "content": system}] if system else []
        full_messages.extend(messages)

        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": full_messages,
            "max_tokens": max_tokens,
            "temperature": self.temperature,
            **self.extra_kwargs,
        }
        if self.api_key:
            kwargs["api_key"] = self.api_key
        if self.api_base:
            kwargs["api_base"] = self.api_base
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        logger.debug(f"LLM call to {self.model} ({len(full_messages)} messages)")
        response = await litellm.acompletion(**kwargs)

        choice = response.choices[0]
        usage = getattr(response, "usage", None)
        return LLMResponse(
            content=choice.message.content or "",
            model=getattr(response, "model", None) or self.model,
            input_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            output_tokens=getattr(usage, "completion_tokens", 0) or 0,
            stop_reason=choice.finish_reason or "",
            raw_response=response,
        )
