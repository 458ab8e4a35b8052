"""
Interrupt Controller - cooperative cancellation for graph runs.

Cancellation is a flag, not a preemption. The executor checks it at every
step boundary, and nodes that wait for a long time (timers, approvals,
feeds) wait through ``sleep()``, which re-checks the flag at least once per
``poll_interval``. Worst-case cancellation latency is therefore one poll
interval plus whatever the in-flight node does after it wakes up.

Typical wiring for a long-running process:

    interrupt = InterruptController(poll_interval=1.0)
    interrupt.install_signal_handlers()  # SIGINT/SIGTERM -> request_cancel
    result = await graph.invoke({}, interrupt=interrupt)
    if result.cancelled:
        ...
"""

import asyncio
import contextlib
import logging
import signal
import threading
from collections.abc import Iterable
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class InterruptController:
    """Cancellation flag shared between a run and whoever may stop it."""

    def __init__(self, poll_interval: float = 0.5):
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        self.poll_interval = poll_interval
        # threading.Event so request_cancel() is safe from signal handlers and other threads
        self._flag = threading.Event()
        self._reason: str | None = None
        self._lock = threading.RLock()
        self._loop_signals: list[signal.Signals] = []
        self._previous_handlers: dict[signal.Signals, Any] = {}
        self._loop: asyncio.AbstractEventLoop | None = None

    def request_cancel(self, reason: str = "cancellation requested") -> None:
        """Ask the run to stop at its next check. Idempotent; the first reason wins."""
        with self._lock:
            if self._flag.is_set():
                return
            self._reason = reason
            self._flag.set()
        logger.info(f"⏹ Cancel requested: {reason}")

    def is_cancel_requested(self) -> bool:
        return self._flag.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    def reset(self) -> None:
        """Clear the flag so the controller can guard another run."""
        with self._lock:
            self._flag.clear()
            self._reason = None

    async def sleep(self, seconds: float) -> bool:
        """
        Suspend for ``seconds`` unless cancellation is requested first.

        Returns:
            True if the full duration elapsed, False if cancelled.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + max(seconds, 0.0)
        while True:
            if self.is_cancel_requested():
                return False
            remaining = deadline - loop.time()
            if remaining <= 0:
                return True
            await asyncio.sleep(min(self.poll_interval, remaining))

    async def wait_for(self, awaitable: Any) -> tuple[bool, Any]:
        """
        Await ``awaitable`` while watching for cancellation.

        The awaited work is cancelled if the controller fires first.

        Returns:
            (True, result) when the work finished, (False, None) when cancelled.
        """
        task = asyncio.ensure_future(awaitable)
        try:
            while not task.done():
                if self.is_cancel_requested():
                    await self._discard(task)
                    return False, None
                await asyncio.wait({task}, timeout=self.poll_interval)
            return True, task.result()
        finally:
            if not task.done():
                await self._discard(task)

    @staticmethod
    async def _discard(task: "asyncio.Future[Any]") -> None:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    def install_signal_handlers(self, signals: Iterable[signal.Signals] = DEFAULT_SIGNALS) -> None:
        """
        Route OS termination signals to ``request_cancel``.

        Uses the running loop's signal support where available and falls
        back to ``signal.signal`` (e.g. on Windows or outside a loop).
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        for sig in signals:
            reason = f"received {sig.name}"
            if loop is not None:
                try:
                    loop.add_signal_handler(sig, self.request_cancel, reason)
                    self._loop_signals.append(sig)
                    self._loop = loop
                    continue
                except (NotImplementedError, RuntimeError):
                    pass
            previous = signal.signal(sig, lambda _signum, _frame, r=reason: self.request_cancel(r))
            self._previous_handlers[sig] = previous

        installed = [*self._loop_signals, *self._previous_handlers]
        logger.debug(f"Installed cancel handlers for {[s.name for s in installed]}")

    def remove_signal_handlers(self) -> None:
        """Undo ``install_signal_handlers``."""
        if self._loop is not None:
            for sig in self._loop_signals:
                self._loop.remove_signal_handler(sig)
        for sig, previous in self._previous_handlers.items():
            signal.signal(sig, previous if previous is not None else signal.SIG_DFL)
        self._loop_signals.clear()
        self._previous_handlers.clear()
        self._loop = None
