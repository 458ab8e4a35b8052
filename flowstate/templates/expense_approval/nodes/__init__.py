"""Node functions for the Expense Approval agent."""

import json
import logging
import re

from flowstate.graph.hitl import ApprovalRequest

logger = logging.getLogger(__name__)

EXTRACTION_PROMPT = (
    "Extract JSON: { category: string, amount: number, risk_score: number (1-10) }."
)
FALLBACK_EXTRACTION = {"category": "Unknown", "amount": 0, "risk_score": 10}

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def parse_extraction(text: str) -> dict:
    """Pull the first JSON object out of a model reply, or fall back to Unknown/0/10."""
    match = _JSON_OBJECT.search(text or "")
    if match is None:
        return dict(FALLBACK_EXTRACTION)
    try:
        data = json.loads(match.group())
        return {
            "category": str(data.get("category") or "Unknown"),
            "amount": float(data.get("amount") or 0),
            "risk_score": int(data.get("risk_score") or 0),
        }
    except (json.JSONDecodeError, AttributeError, TypeError, ValueError):
        return dict(FALLBACK_EXTRACTION)


async def initial_review(state, ctx):
    """Ask the model to classify the expense and extract the USD amount."""
    llm = ctx.service("llm")
    response = await llm.acomplete(
        messages=[{"role": "user", "content": state["expense_details"] or ""}],
        system=EXTRACTION_PROMPT,
    )
    data = parse_extraction(response.content)
    logger.info(
        f"  > Extracted: ${data['amount']} for {data['category']} (Risk: {data['risk_score']})"
    )
    return {
        "classification": data["category"],
        "amount_usd": data["amount"],
        "risk_score": data["risk_score"],
        "logs": [f"Reviewed item: {data['category']}"],
    }


async def policy_check(state, ctx):
    verdict = await ctx.service("tools").call("check_policy", {"category": state["classification"]})
    if not verdict["allowed"]:
        logger.info(f"  > Policy Violation: {verdict['reason']}")
        return {"status": "REJECTED", "logs": [f"Policy Violation: {verdict['reason']}"]}
    return {"logs": ["Policy Check Passed"]}


async def human_approval(state, ctx):
    """Suspend until a manager answers through the approval gate."""
    logger.info(
        f"  > ALERT: Manager approval needed for {state['classification']} (${state['amount_usd']})"
    )
    request = ApprovalRequest(
        node_id=ctx.node_name,
        summary=f"{state['classification']} expense of ${state['amount_usd']}",
        details={
            "expense": state["expense_details"],
            "category": state["classification"],
            "amount_usd": state["amount_usd"],
            "risk_score": state["risk_score"],
        },
    )
    result = await ctx.service("approvals").request(request, ctx.interrupt)
    if result is None:
        # Cancelled while waiting; the executor discards this step
        return None
    if result.approved:
        return {"status": "APPROVED", "logs": ["Manager Manually Approved"]}
    return {"status": "REJECTED", "logs": [f"Manager Rejected ({result.approver})"]}


def auto_approve(state):
    return {"status": "APPROVED", "logs": ["Auto-Approved (<$50)"]}


def auto_reject_high_value(state):
    return {"status": "REJECTED", "logs": ["Rejected (> $1000)"]}


def finalize(state):
    logger.info(f"  > Final Status: {state['status']}")
    return {}
