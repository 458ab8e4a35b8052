"""Tests for the retrieval-augmented Support Bot."""

import pytest

from flowstate.graph import RunStatus
from flowstate.llm import MockLLMProvider
from flowstate.templates.support_bot import DEFAULT_DOCS, KnowledgeBase, SupportBotAgent


@pytest.fixture
def kb():
    return KnowledgeBase(DEFAULT_DOCS)


def test_retrieve_matches_keywords(kb):
    docs = kb.retrieve("What is the rate limit?")
    assert [doc["id"] for doc in docs] == [1]


def test_retrieve_ignores_punctuation(kb):
    docs = kb.retrieve("How do I fix error?")
    assert [doc["id"] for doc in docs] == [3]


def test_retrieve_falls_back_when_nothing_matches(kb):
    docs = kb.retrieve("How do I cook pasta?")
    assert docs == [{"id": None, "text": "No relevant documentation found."}]


def test_short_words_are_ignored(kb):
    assert kb.retrieve("API key")[0]["id"] is None


@pytest.mark.asyncio
async def test_answer_comes_from_retrieved_docs():
    agent = SupportBotAgent()
    result = await agent.run("What is the rate limit?", mock_mode=True)

    assert result.status == RunStatus.COMPLETED
    assert result.path == ["retrieve", "generate"]
    assert result.state["answer"] == DEFAULT_DOCS[0]["text"]


@pytest.mark.asyncio
async def test_unknown_question_gets_i_dont_know():
    agent = SupportBotAgent()
    result = await agent.run("How do I cook pasta?", mock_mode=True)

    assert result.state["answer"] == "I don't know"


@pytest.mark.asyncio
async def test_prompt_carries_context_and_question():
    llm = MockLLMProvider(["Rotate it under Settings."])
    agent = SupportBotAgent()
    result = await agent.run("How do I reset my key?", llm=llm)

    assert result.state["answer"] == "Rotate it under Settings."
    prompt = llm.calls[0]["messages"][0]["content"]
    assert "Settings > Security > Rotate Keys" in prompt
    assert prompt.endswith("Question: How do I reset my key?")
    assert "ONLY the context" in llm.calls[0]["system"]


def test_demo_command_asks_three_questions(monkeypatch):
    from click.testing import CliRunner

    from flowstate.templates.support_bot.__main__ import cli

    monkeypatch.setattr("flowstate.templates.support_bot.__main__.configure_logging", lambda *a, **k: None)

    outcome = CliRunner().invoke(cli, ["demo", "--mock"])

    assert outcome.exit_code == 0, outcome.output
    assert f"Agent: {DEFAULT_DOCS[0]['text']}" in outcome.output
    assert f"Agent: {DEFAULT_DOCS[2]['text']}" in outcome.output
    assert "Agent: I don't know" in outcome.output
