"""Keyword-matched documentation store."""

import re
from collections.abc import Iterable

FALLBACK_DOC = {"id": None, "text": "No relevant documentation found."}
MIN_KEYWORD_LENGTH = 4


class KnowledgeBase:
    """
    Naive keyword retrieval: a doc matches when it contains any query word
    longer than three characters. Swap in vector search behind the same
    ``retrieve`` method for real use.
    """

    def __init__(self, docs: Iterable[dict]):
        self.docs = list(docs)

    def retrieve(self, query: str) -> list[dict]:
        words = [w for w in re.findall(r"\w+", query.lower()) if len(w) >= MIN_KEYWORD_LENGTH]
        matches = [doc for doc in self.docs if any(w in doc["text"].lower() for w in words)]
        return matches or [dict(FALLBACK_DOC)]
