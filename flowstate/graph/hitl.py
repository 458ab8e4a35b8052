"""
Human-in-the-loop approvals.

A node that needs a human decision submits an ApprovalRequest to the
ApprovalGate it was given as a service and suspends until someone outside
the run resolves it, or until the run is cancelled:

    gate = ctx.service("approvals")
    result = await gate.request(ApprovalRequest(...), ctx.interrupt)
    if result is None:  # cancelled while waiting
        return None

The host (a CLI prompt, a web handler, a test) lists ``gate.pending`` and
calls ``gate.resolve(request_id, ApprovalResult(...))``.
"""

import asyncio
import logging
import uuid
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from flowstate.graph.interrupt import InterruptController

logger = logging.getLogger(__name__)


class ApprovalDecision(StrEnum):
    """What the human decided."""

    APPROVE = "approve"
    REJECT = "reject"


class ApprovalRequest(BaseModel):
    """A question put to a human approver."""

    id: str = Field(default_factory=lambda: f"approval_{uuid.uuid4().hex[:8]}")
    node_id: str = ""
    summary: str
    details: dict[str, Any] = Field(default_factory=dict)

    def format_for_display(self) -> str:
        parts = [f"📋 Approval needed: {self.summary}"]
        for key, value in self.details.items():
            parts.append(f"   • {key}: {value}")
        return "\n".join(parts)


class ApprovalResult(BaseModel):
    """The human's answer to an ApprovalRequest."""

    decision: ApprovalDecision
    approver: str = "manager"
    comment: str = ""

    @property
    def approved(self) -> bool:
        return self.decision == ApprovalDecision.APPROVE


class ApprovalGate:
    """Parks approval requests until they are resolved from outside the run."""

    def __init__(self) -> None:
        self._pending: dict[str, tuple[ApprovalRequest, asyncio.Future[ApprovalResult]]] = {}

    @property
    def pending(self) -> list[ApprovalRequest]:
        return [request for request, _ in self._pending.values()]

    async def request(
        self,
        request: ApprovalRequest,
        interrupt: "InterruptController",
    ) -> ApprovalResult | None:
        """
        Submit ``request`` and wait for its resolution.

        Returns:
            The ApprovalResult, or None if the run was cancelled first.
        """
        future: asyncio.Future[ApprovalResult] = asyncio.get_running_loop().create_future()
        self._pending[request.id] = (request, future)
        logger.info(f"⏸ Waiting for approval {request.id}: {request.summary}")
        try:
            finished, result = await interrupt.wait_for(asyncio.shield(future))
        finally:
            self._pending.pop(request.id, None)
        if not finished:
            logger.info(f"⏹ Approval {request.id} abandoned")
            return None
        logger.info(f"✓ Approval {request.id}: {result.decision} by {result.approver}")
        return result

    def resolve(self, request_id: str, result: ApprovalResult) -> None:
        """Answer a pending request. Raises KeyError for unknown or settled ids."""
        try:
            _, future = self._pending[request_id]
        except KeyError:
            raise KeyError(f"No pending approval with id '{request_id}'") from None
        if future.done():
            raise KeyError(f"Approval '{request_id}' was already resolved")
        future.set_result(result)


class AutoApprover(ApprovalGate):
    """A gate whose simulated manager always gives the same answer."""

    def __init__(
        self,
        decision: ApprovalDecision = ApprovalDecision.APPROVE,
        approver: str = "auto-approver",
        delay: float = 0.0,
    ) -> None:
        super().__init__()
        self.decision = decision
        self.approver = approver
        self.delay = delay
        self.requests: list[ApprovalRequest] = []

    async def request(
        self,
        request: ApprovalRequest,
        interrupt: "InterruptController",
    ) -> ApprovalResult | None:
        self.requests.append(request)
        if self.delay and not await interrupt.sleep(self.delay):
            return None
        logger.info(f"✓ Auto-{self.decision} for {request.id}")
        return ApprovalResult(decision=self.decision, approver=self.approver)
