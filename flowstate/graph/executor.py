"""
Graph Executor - Runs compiled graphs.

The executor:
1. Seeds a fresh ChannelStore from the channel defaults and the initial state
2. Runs one node at a time, starting at the entry point
3. Merges each node's partial update through the channel reducers
4. Routes on the merged state until END, cancellation, failure or the
   step budget
5. Returns an ExecutionResult (it never raises for run-time failures)

Cancellation is cooperative: the InterruptController is checked before every
step and again after the in-flight node returns, in which case the node's
update is discarded.

Cancelling the task that runs the executor (``task.cancel()``,
``asyncio.timeout``) is not cooperative: the run is recorded as CANCELLED on
``executor.result`` and the CancelledError propagates to the caller.
"""

import asyncio
import logging
import time
import uuid
from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from flowstate.config import RunConfig
from flowstate.graph.channels import ChannelStore, StateSnapshot
from flowstate.graph.edge import END
from flowstate.graph.errors import (
    GraphError,
    NodeError,
    RoutingError,
    StepBudgetExceeded,
    UnknownChannelError,
)
from flowstate.graph.interrupt import InterruptController
from flowstate.graph.node import NodeContext, NodeSpec
from flowstate.observability import get_trace_context, restore_trace_context, set_trace_context
from flowstate.runtime.event_bus import EventBus, EventType

if TYPE_CHECKING:
    from flowstate.graph.compiler import CompiledGraph


class RunStatus(StrEnum):
    """Lifecycle of one run."""

    READY = "ready"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class StepRecord:
    """One node invocation, its merged update and where the run went next."""

    step_index: int
    node_name: str
    input_snapshot: StateSnapshot
    output_update: dict[str, Any]
    next_targets: list[str] = field(default_factory=list)
    latency_ms: int = 0


@dataclass
class ExecutionResult:
    """Result of running a graph."""

    run_id: str
    status: RunStatus
    state: dict[str, Any] = field(default_factory=dict)
    error: GraphError | None = None
    steps_executed: int = 0
    path: list[str] = field(default_factory=list)  # Node names in execution order
    steps: list[StepRecord] = field(default_factory=list)
    failed_node: str | None = None
    cancel_reason: str | None = None
    total_latency_ms: int = 0

    @property
    def success(self) -> bool:
        return self.status == RunStatus.COMPLETED

    @property
    def cancelled(self) -> bool:
        return self.status == RunStatus.CANCELLED

    @property
    def failed(self) -> bool:
        return self.status == RunStatus.FAILED

    def raise_for_status(self) -> dict[str, Any]:
        """Return the final state, or raise the run's error if it FAILED."""
        if self.status == RunStatus.FAILED and self.error is not None:
            raise self.error
        return self.state


class GraphExecutor:
    """
    Executes one run of a compiled graph.

    An executor is single-use: it owns the run's ChannelStore and step
    records. CompiledGraph.invoke() creates one per call.

    Example:
        executor = GraphExecutor(graph, services={"llm": MockLLMProvider()})
        result = await executor.execute({"expense_details": "Taxi, $4.50"})
        if result.success:
            print(result.state["status"])
    """

    def __init__(
        self,
        graph: "CompiledGraph",
        *,
        interrupt: InterruptController | None = None,
        services: Mapping[str, Any] | None = None,
        config: RunConfig | None = None,
        event_bus: EventBus | None = None,
        run_id: str | None = None,
    ):
        """
        Args:
            graph: Compiled graph to run
            interrupt: Cancellation flag shared with whoever may stop the run;
                a private one is created when omitted
            services: Collaborators handed to nodes through NodeContext
            config: Limits for this run; defaults to the graph's config
            event_bus: Optional bus for run lifecycle events
            run_id: Identifier for logs and events; generated when omitted
        """
        self.graph = graph
        self.config = config or graph.config
        self.interrupt = interrupt or InterruptController(poll_interval=self.config.poll_interval)
        self.services = dict(services or {})
        self.run_id = run_id or f"run_{uuid.uuid4().hex[:12]}"
        self.status = RunStatus.READY
        self.logger = logging.getLogger(__name__)
        self._event_bus = event_bus
        self._store = ChannelStore(graph.channels)
        self._router = graph.router()
        self._records: list[StepRecord] = []
        self._path: list[str] = []
        self._result: ExecutionResult | None = None
        self._started = False
        self._start_time = 0.0

    @property
    def result(self) -> ExecutionResult | None:
        """The final result once the run has ended."""
        return self._result

    async def execute(self, initial_state: Mapping[str, Any] | None = None) -> ExecutionResult:
        """Run to a terminal status and return the result."""
        async for _ in self.stream(initial_state):
            pass
        if self._result is None:
            raise RuntimeError(f"Run {self.run_id} ended without a result")
        return self._result

    async def stream(
        self, initial_state: Mapping[str, Any] | None = None
    ) -> AsyncIterator[StepRecord]:
        """Run the graph, yielding each StepRecord once its step is routed."""
        if self._started:
            raise RuntimeError("GraphExecutor runs once; create a new executor for another run")
        self._started = True

        saved_context = get_trace_context()
        set_trace_context(run_id=self.run_id, graph_id=self.graph.graph_id)
        try:
            async for record in self._run(initial_state):
                yield record
        finally:
            restore_trace_context(saved_context)

    async def _run(self, initial_state: Mapping[str, Any] | None) -> AsyncIterator[StepRecord]:
        graph = self.graph
        self._start_time = time.perf_counter()
        self.status = RunStatus.RUNNING

        self.logger.info(f"🚀 Starting run {self.run_id} of graph '{graph.graph_id}'")
        self.logger.info(f"   Entry node: {graph.entry_point}")
        await self._emit(EventType.RUN_STARTED, entry_point=graph.entry_point)

        try:
            self._store.initialize(initial_state)
        except UnknownChannelError as e:
            self.logger.error(f"✗ Invalid initial state: {e}")
            await self._fail(e, node_name=None)
            return
        except Exception as e:
            self.logger.error(f"✗ Invalid initial state: {type(e).__name__}: {e}")
            error = GraphError(f"Invalid initial state: {type(e).__name__}: {e}")
            error.__cause__ = e
            await self._fail(error, node_name=None)
            return

        current = graph.entry_point
        steps = 0

        while True:
            if self.interrupt.is_cancel_requested():
                await self._cancel(self.interrupt.reason)
                return

            node = graph.get_node(current)
            try:
                snapshot = self._store.snapshot()
            except Exception as e:
                # A value the previous step stored cannot be copied for this one
                self.logger.error(f"   ✗ Cannot snapshot state for '{current}': {e}")
                await self._fail(NodeError(current, e), node_name=current)
                return
            set_trace_context(node_id=current, step=steps)
            self.logger.info(f"▶ Step {steps + 1}: {current}")
            await self._emit(EventType.NODE_STARTED, node_id=current, step=steps)

            ctx = NodeContext(
                run_id=self.run_id,
                graph_id=graph.graph_id,
                node_name=current,
                step_index=steps,
                interrupt=self.interrupt,
                config=self.config,
                services=self.services,
            )

            node_start = time.perf_counter()
            try:
                raw_update = await self._call_node(node, snapshot, ctx)
            except asyncio.CancelledError:
                self.logger.info(f"⏹ Run task cancelled during '{current}'; update discarded")
                await self._cancel("run task cancelled")
                raise
            except Exception as e:
                if self.interrupt.is_cancel_requested():
                    await self._cancel(self.interrupt.reason)
                    return
                self.logger.error(f"   ✗ Failed: {type(e).__name__}: {e}")
                await self._fail(NodeError(current, e), node_name=current)
                return
            latency_ms = int((time.perf_counter() - node_start) * 1000)

            if self.interrupt.is_cancel_requested():
                self.logger.info(f"⏹ Cancelled while '{current}' ran; update discarded")
                await self._cancel(self.interrupt.reason)
                return

            try:
                update = self._coerce_update(current, raw_update)
                self._store.merge(update)
            except Exception as e:
                # Reducer errors included; merge() has applied nothing
                self.logger.error(f"   ✗ Bad update from '{current}': {type(e).__name__}: {e}")
                await self._fail(NodeError(current, e), node_name=current)
                return

            steps += 1
            self._path.append(current)
            record = StepRecord(
                step_index=steps - 1,
                node_name=current,
                input_snapshot=snapshot,
                output_update=update,
                latency_ms=latency_ms,
            )
            self._records.append(record)
            if update:
                self.logger.info(f"   Updated: {sorted(update)}")
            await self._emit(
                EventType.NODE_COMPLETED,
                node_id=current,
                step=record.step_index,
                latency_ms=latency_ms,
                updated=sorted(update),
            )

            try:
                merged = self._store.snapshot()
            except Exception as e:
                self.logger.error(f"   ✗ Cannot snapshot state after '{current}': {e}")
                yield record
                await self._fail(NodeError(current, e), node_name=current)
                return

            try:
                targets = await self._router.route(current, merged)
            except RoutingError as e:
                self.logger.error(f"   ✗ Routing failed: {e}")
                yield record
                await self._fail(e, node_name=current)
                return

            record.next_targets = list(targets)
            yield record

            if targets == [END]:
                self.logger.info(f"   → {END}")
                await self._complete()
                return

            if steps >= self.config.max_steps:
                self.logger.error(f"✗ Step budget of {self.config.max_steps} exhausted")
                await self._fail(StepBudgetExceeded(self.config.max_steps, current), node_name=current)
                return

            if len(targets) != 1:
                error = RoutingError(
                    current,
                    label=targets,
                    allowed=self._router.edge_for(current).labels(),
                    message=f"'{current}' routed to {targets}; fan-out is not supported",
                )
                await self._fail(error, node_name=current)
                return

            next_node = targets[0]
            self.logger.info(f"   → Next: {next_node}")
            await self._emit(EventType.EDGE_TRAVERSED, node_id=current, source=current, target=next_node)
            current = next_node

    async def _call_node(self, node: NodeSpec, snapshot: StateSnapshot, ctx: NodeContext) -> Any:
        timeout = node.timeout if node.timeout is not None else self.config.node_timeout
        if timeout is None:
            return await node.run(snapshot, ctx)
        return await asyncio.wait_for(node.run(snapshot, ctx), timeout=timeout)

    @staticmethod
    def _coerce_update(node_name: str, raw: Any) -> dict[str, Any]:
        if raw is None:
            return {}
        if not isinstance(raw, Mapping):
            raise TypeError(
                f"Node '{node_name}' returned {type(raw).__name__}; expected a mapping or None"
            )
        return dict(raw)

    # === TERMINAL TRANSITIONS ===

    def _finish(self, status: RunStatus, **kwargs: Any) -> ExecutionResult:
        self.status = status
        try:
            state = self._store.read_all()
        except Exception as e:
            self.logger.warning(f"Final state is not deep-copyable ({e}); returning a shallow copy")
            state = self._store.read_all(deep=False)
        self._result = ExecutionResult(
            run_id=self.run_id,
            status=status,
            state=state,
            steps_executed=len(self._records),
            path=list(self._path),
            steps=list(self._records),
            total_latency_ms=int((time.perf_counter() - self._start_time) * 1000),
            **kwargs,
        )
        return self._result

    async def _complete(self) -> None:
        result = self._finish(RunStatus.COMPLETED)
        self.logger.info("✓ Run complete")
        self.logger.info(f"   Steps: {result.steps_executed}")
        self.logger.info(f"   Path: {' → '.join(result.path)}")
        self.logger.info(f"   Total latency: {result.total_latency_ms}ms")
        await self._emit(
            EventType.RUN_COMPLETED,
            steps=result.steps_executed,
            path=result.path,
        )

    async def _cancel(self, reason: str | None) -> None:
        result = self._finish(RunStatus.CANCELLED, cancel_reason=reason)
        self.logger.info(f"⏹ Run cancelled after {result.steps_executed} steps ({reason})")
        await self._emit(EventType.RUN_CANCELLED, reason=reason, steps=result.steps_executed)

    async def _fail(self, error: GraphError, node_name: str | None) -> None:
        result = self._finish(RunStatus.FAILED, error=error, failed_node=node_name)
        self.logger.error(f"✗ Run failed after {result.steps_executed} steps: {error}")
        if node_name is not None and isinstance(error, NodeError):
            await self._emit(EventType.NODE_FAILED, node_id=node_name, error=str(error))
        await self._emit(EventType.RUN_FAILED, node_id=node_name, error=str(error))

    async def _emit(self, event_type: EventType, node_id: str | None = None, **data: Any) -> None:
        if self._event_bus is None:
            return
        await self._event_bus.emit(
            event_type,
            run_id=self.run_id,
            graph_id=self.graph.graph_id,
            node_id=node_id,
            **data,
        )
