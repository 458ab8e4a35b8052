"""Tests for the LLM providers."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest

from flowstate.llm import LiteLLMProvider, MockLLMProvider


def fake_completion(content="hello", finish_reason="stop"):
    return SimpleNamespace(
        model="anthropic/test-model",
        choices=[SimpleNamespace(message=SimpleNamespace(content=content), finish_reason=finish_reason)],
        usage=SimpleNamespace(prompt_tokens=12, completion_tokens=3),
    )


@pytest.mark.asyncio
async def test_litellm_provider_builds_request_and_parses_response():
    provider = LiteLLMProvider(model="anthropic/test-model", api_key="sk-test", temperature=0.2)

    with patch("litellm.acompletion", new=AsyncMock(return_value=fake_completion())) as acompletion:
        response = await provider.acomplete(
            [{"role": "user", "content": "hi"}], system="Be brief.", max_tokens=50
        )

    kwargs = acompletion.await_args.kwargs
    assert kwargs["model"] == "anthropic/test-model"
    assert kwargs["messages"] == [
        {"role": "system", "content": "Be brief."},
        {"role": "user", "content": "hi"},
    ]
    assert kwargs["max_tokens"] == 50
    assert kwargs["temperature"] == 0.2
    assert kwargs["api_key"] == "sk-test"
    assert "response_format" not in kwargs

    assert response.content == "hello"
    assert response.input_tokens == 12
    assert response.output_tokens == 3
    assert response.stop_reason == "stop"


@pytest.mark.asyncio
async def test_litellm_provider_json_mode():
    provider = LiteLLMProvider(model="openai/gpt-4o-mini")

    with patch("litellm.acompletion", new=AsyncMock(return_value=fake_completion("{}"))) as acompletion:
        await provider.acomplete([{"role": "user", "content": "x"}], json_mode=True)

    kwargs = acompletion.await_args.kwargs
    assert kwargs["response_format"] == {"type": "json_object"}
    assert kwargs["messages"][0]["role"] == "user"


@pytest.mark.asyncio
async def test_litellm_errors_propagate():
    provider = LiteLLMProvider(model="openai/gpt-4o-mini")

    with patch("litellm.acompletion", new=AsyncMock(side_effect=ConnectionError("down"))):
        with pytest.raises(ConnectionError):
            await provider.acomplete([{"role": "user", "content": "x"}])


@pytest.mark.asyncio
async def test_mock_provider_scripts_and_records():
    llm = MockLLMProvider(["first", ValueError("boom"), "last"])

    assert (await llm.acomplete([{"role": "user", "content": "a"}])).content == "first"
    with pytest.raises(ValueError):
        await llm.acomplete([{"role": "user", "content": "b"}])
    assert (await llm.acomplete([{"role": "user", "content": "c"}])).content == "last"
    assert (await llm.acomplete([{"role": "user", "content": "d"}])).content == "last"
    assert [call["messages"][0]["content"] for call in llm.calls] == ["a", "b", "c", "d"]


@pytest.mark.asyncio
async def test_mock_provider_callable_and_default():
    echo = MockLLMProvider(lambda messages, system: f"{system}:{messages[-1]['content']}")
    assert (await echo.acomplete([{"role": "user", "content": "q"}], system="s")).content == "s:q"

    default = MockLLMProvider()
    assert (await default.acomplete([])).content == "OK"
