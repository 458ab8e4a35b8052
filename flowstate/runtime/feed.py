"""
Event sources polled by ambient graphs.

An ambient graph loops on a node that sleeps, polls a source and routes on
whether anything new arrived. The source is injected per run as a service,
so tests can replay a fixed list while a deployment reads RSS, a websocket
or a database.
"""

import logging
from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class EventSource(Protocol):
    """Anything that can be polled for the next item."""

    @property
    def exhausted(self) -> bool:
        """True when the source will never produce another item."""
        ...

    async def poll(self) -> Any | None:
        """Return the next item, or None when nothing new is available."""
        ...


class ReplayFeed:
    """
    Replays a fixed list of items, one per poll.

    With ``cycle=True`` the list repeats forever; otherwise the feed is
    exhausted after the last item and every later poll returns None.
    """

    def __init__(self, items: Iterable[Any], cycle: bool = False):
        self._items = list(items)
        self.cycle = cycle
        self.tick = 0

    def __len__(self) -> int:
        return len(self._items)

    @property
    def exhausted(self) -> bool:
        if not self._items:
            return True
        return not self.cycle and self.tick >= len(self._items)

    async def poll(self) -> Any | None:
        if self.exhausted:
            return None
        item = self._items[self.tick % len(self._items)]
        self.tick += 1
        logger.debug(f"Feed tick {self.tick}: {item!r}")
        return item
