"""Node functions for the SDR Pipeline agent."""

import logging

from ..config import COST_PER_RUN

logger = logging.getLogger(__name__)

PROSPECT_PROMPT = "Extract the CEO name and a personalized 'hook' based on their interests."
EMAIL_PROMPT = "Write a short, punchy cold email selling 'Agent0 Sales Tool'. Use the hook."


def billing_check(state, ctx):
    """Gatekeeper: charge the run to the user's credits or record why we can't."""
    logger.info(f"[System] Checking billing for {state['user_id']}...")
    ledger = ctx.service("ledger")
    account = ledger.get(state["user_id"])
    if account is None:
        return {"error": "User not found"}
    if account.credits < COST_PER_RUN:
        return {
            "error": (
                f"Insufficient credits. You have {account.credits}, need {COST_PER_RUN}. "
                "Please Upgrade."
            )
        }
    ledger.deduct(state["user_id"], COST_PER_RUN)
    return {}


def scrape_company(state):
    """Canned page text standing in for a real scraper."""
    url = state["target_url"] or ""
    name = url.replace("https://", "").replace("http://", "").replace(".com", "")
    logger.info(f"[Agent] Scraping {url}...")
    content = (
        f"Welcome to {name} AI!\n"
        "We build autonomous widgets for enterprise logistics.\n"
        "Our mission is to optimize supply chains by 50%.\n"
        "Lead by CEO Jane Doe, who loves sailing and efficiency."
    )
    return {"company_info": content}


async def identify_prospect(state, ctx):
    logger.info("[Agent] Identifying Decision Maker...")
    response = await ctx.service("llm").acomplete(
        messages=[{"role": "user", "content": state["company_info"]}],
        system=PROSPECT_PROMPT,
    )
    return {"decision_maker": response.content}


async def draft_email(state, ctx):
    logger.info("[Agent] Drafting High-Conversion Email...")
    response = await ctx.service("llm").acomplete(
        messages=[
            {
                "role": "user",
                "content": (
                    f"Prospect Info: {state['decision_maker']}. "
                    f"Company context: {state['company_info']}"
                ),
            }
        ],
        system=EMAIL_PROMPT,
    )
    return {"email_draft": response.content}


def finalize_error(state):
    logger.error(f"[Error] {state['error']}")
    return None
