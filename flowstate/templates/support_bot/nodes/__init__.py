"""Node functions for the Support Bot agent."""

import logging

logger = logging.getLogger(__name__)

ANSWER_PROMPT = (
    "You are a helpful support agent. Answer the user using ONLY the context provided "
    "below. If unsure, say 'I don't know'."
)


def retrieve(state, ctx):
    logger.info(f"[Agent] Searching docs for: \"{state['question']}\"...")
    docs = ctx.service("knowledge_base").retrieve(state["question"] or "")
    logger.info(f"  > Found {len(docs)} articles.")
    return {"retrieved_docs": docs}


async def generate(state, ctx):
    """Answer from the retrieved context only."""
    context = "\n".join(f"- {doc['text']}" for doc in state["retrieved_docs"])
    response = await ctx.service("llm").acomplete(
        messages=[
            {"role": "user", "content": f"Context:\n{context}\n\nQuestion: {state['question']}"}
        ],
        system=ANSWER_PROMPT,
    )
    return {"answer": response.content}
