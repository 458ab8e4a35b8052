"""Tests for the metered SDR pipeline."""

import pytest

from flowstate.graph import RunStatus
from flowstate.llm import MockLLMProvider
from flowstate.templates.sdr_pipeline import COST_PER_RUN, CreditLedger, SDRPipelineAgent, route_billing


@pytest.fixture
def agent():
    # Fresh ledger per test; the module-level agent would leak balances between tests
    return SDRPipelineAgent()


@pytest.mark.asyncio
async def test_paid_run_drafts_email_and_charges_credits(agent):
    result = await agent.run("user_123", "https://acme-logistics.com", mock_mode=True)

    assert result.status == RunStatus.COMPLETED
    assert result.path == ["billing_check", "scrape_company", "identify_prospect", "draft_email"]
    assert result.state["error"] is None
    assert "Jane Doe" in result.state["company_info"]
    assert "acme-logistics AI" in result.state["company_info"]
    assert result.state["decision_maker"].startswith("CEO: Jane Doe")
    assert result.state["email_draft"].startswith("Subject:")
    assert agent.ledger.get("user_123").credits == 10 - COST_PER_RUN


@pytest.mark.asyncio
async def test_low_balance_short_circuits_without_charging(agent):
    llm = MockLLMProvider(["should not be called"])
    result = await agent.run("user_456", "https://acme.com", llm=llm)

    assert result.status == RunStatus.COMPLETED
    assert result.path == ["billing_check", "finalize_error"]
    assert result.state["error"] == "Insufficient credits. You have 2, need 5. Please Upgrade."
    assert result.state["email_draft"] is None
    assert agent.ledger.get("user_456").credits == 2
    assert llm.calls == []


@pytest.mark.asyncio
async def test_unknown_user(agent):
    result = await agent.run("user_999", "https://acme.com", mock_mode=True)

    assert result.path == ["billing_check", "finalize_error"]
    assert result.state["error"] == "User not found"


@pytest.mark.asyncio
async def test_credits_run_out_across_runs(agent):
    first = await agent.run("user_123", "https://a.com", mock_mode=True)
    second = await agent.run("user_123", "https://b.com", mock_mode=True)
    third = await agent.run("user_123", "https://c.com", mock_mode=True)

    assert first.state["error"] is None
    assert second.state["error"] is None
    assert third.state["error"] == "Insufficient credits. You have 0, need 5. Please Upgrade."
    assert agent.ledger.get("user_123").credits == 0


@pytest.mark.asyncio
async def test_model_failure_fails_after_billing(agent):
    result = await agent.run("user_123", "https://acme.com", llm=MockLLMProvider([TimeoutError("slow")]))

    assert result.status == RunStatus.FAILED
    assert result.failed_node == "identify_prospect"
    assert agent.ledger.get("user_123").credits == 5


def test_ledger_deduct_refuses_overdraft():
    ledger = CreditLedger({"u": {"credits": 3}})
    assert ledger.get("u").plan == "FREE"
    with pytest.raises(ValueError):
        ledger.deduct("u", 5)
    assert ledger.deduct("u", 3) == 0


def test_route_billing():
    assert route_billing({"error": "User not found"}) == "finalize_error"
    assert route_billing({"error": None}) == "scrape_company"


def test_demo_command_runs_both_users(monkeypatch):
    from click.testing import CliRunner

    from flowstate.templates.sdr_pipeline.__main__ import cli

    monkeypatch.setattr("flowstate.templates.sdr_pipeline.__main__.configure_logging", lambda *a, **k: None)

    outcome = CliRunner().invoke(cli, ["demo", "--mock"])

    assert outcome.exit_code == 0, outcome.output
    assert "=== RUN 1: Wealthy User (Success) ===" in outcome.output
    assert ">>> DELIVERABLE (Ready to Send) <<<" in outcome.output
    assert "Subject:" in outcome.output
    assert "Insufficient credits. You have 2, need 5. Please Upgrade." in outcome.output
