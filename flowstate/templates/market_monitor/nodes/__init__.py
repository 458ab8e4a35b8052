"""Node functions for the Market Monitor agent."""

import logging

logger = logging.getLogger(__name__)

TRIAGE_PROMPT = (
    "You are a personal executive assistant. Decide if a news item is URGENT enough "
    "to interrupt the boss. Return 'URGENT' or 'IGNORE'."
)

NO_ITEM = {"has_new_item": False}
STOP = {"should_stop": True, "has_new_item": False}


async def check_feed(state, ctx):
    """Sleep one poll interval, then poll the feed for the next item."""
    feed = ctx.service("feed")
    if ctx.interrupt.is_cancel_requested():
        logger.info("[Ambient] Shutdown requested, stopping...")
        return STOP
    if ctx.config.demo_mode and feed.exhausted:
        logger.info("[Ambient] Feed exhausted, demo cycle complete")
        return STOP

    logger.info(f"[Ambient] Waking up to check feed... (next check in {ctx.config.poll_interval}s)")
    if not await ctx.interrupt.sleep(ctx.config.poll_interval):
        return STOP

    item = await feed.poll()
    if item is None:
        logger.info("  > No new data.")
        return NO_ITEM

    logger.info(f"  > Found item: \"{item['content']}\"")
    return {
        "latest_news": item,
        "has_new_item": True,
        "last_checked_id": item.get("id"),
    }


async def analyze_importance(state, ctx):
    """Ask the model whether the latest item is worth an interruption."""
    news = state["latest_news"]
    if not news:
        return {"should_alert": False}

    logger.info("  > Analyzing importance...")
    try:
        response = await ctx.service("llm").acomplete(
            messages=[{"role": "user", "content": f"News: {news['content']}"}],
            system=TRIAGE_PROMPT,
            max_tokens=64,
        )
    except Exception as e:
        # Degrade to "not urgent" so one bad model call never stops the monitor
        logger.error(f"  > Error analyzing: {e}")
        return {"should_alert": False, "analysis": f"Error: {e}"}

    return {"should_alert": "URGENT" in response.content, "analysis": response.content}


async def alert_user(state, ctx):
    news = state["latest_news"]
    message = f"Boss, I found something you need to see: {news['content']}"
    await ctx.service("notifier").notify(message)
    return {"alerts": [{"id": news.get("id"), "content": news["content"], "analysis": state["analysis"]}]}
