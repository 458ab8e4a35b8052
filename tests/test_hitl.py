"""Tests for the approval gate."""

import asyncio

import pytest

from flowstate.graph.hitl import (
    ApprovalDecision,
    ApprovalGate,
    ApprovalRequest,
    ApprovalResult,
    AutoApprover,
)
from flowstate.graph.interrupt import InterruptController


@pytest.mark.asyncio
async def test_request_waits_for_external_resolution():
    gate = ApprovalGate()
    interrupt = InterruptController(poll_interval=0.01)
    request = ApprovalRequest(summary="Team dinner $150")

    waiter = asyncio.create_task(gate.request(request, interrupt))
    while not gate.pending:
        await asyncio.sleep(0.01)
    assert gate.pending[0].id == request.id

    gate.resolve(request.id, ApprovalResult(decision=ApprovalDecision.REJECT, approver="cfo"))
    result = await waiter

    assert result.decision == ApprovalDecision.REJECT
    assert not result.approved
    assert gate.pending == []


@pytest.mark.asyncio
async def test_cancellation_abandons_pending_request():
    gate = ApprovalGate()
    interrupt = InterruptController(poll_interval=0.01)
    asyncio.get_running_loop().call_later(0.03, interrupt.request_cancel, "shutdown")

    result = await gate.request(ApprovalRequest(summary="never answered"), interrupt)

    assert result is None
    assert gate.pending == []


def test_resolve_unknown_request():
    with pytest.raises(KeyError):
        ApprovalGate().resolve("missing", ApprovalResult(decision=ApprovalDecision.APPROVE))


@pytest.mark.asyncio
async def test_auto_approver_answers_immediately():
    gate = AutoApprover(decision=ApprovalDecision.REJECT)
    result = await gate.request(ApprovalRequest(summary="x"), InterruptController())

    assert result.decision == ApprovalDecision.REJECT
    assert result.approver == "auto-approver"
    assert len(gate.requests) == 1


def test_request_display():
    request = ApprovalRequest(summary="Laptop", details={"amount_usd": 2500})
    text = request.format_for_display()
    assert "Laptop" in text
    assert "amount_usd: 2500" in text
