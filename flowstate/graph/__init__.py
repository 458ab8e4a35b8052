"""Graph structures: channels, nodes, edges, compilation and execution."""

from flowstate.graph.channels import Channel, ChannelStore, append, replace
from flowstate.graph.compiler import CompiledGraph, GraphCompiler, compile_graph
from flowstate.graph.edge import END, START, EdgeKind, EdgeSpec
from flowstate.graph.errors import (
    CompileError,
    GraphError,
    NodeError,
    RoutingError,
    StepBudgetExceeded,
    UnknownChannelError,
)
from flowstate.graph.executor import ExecutionResult, GraphExecutor, RunStatus, StepRecord

# HITL (Human-in-the-loop)
from flowstate.graph.hitl import (
    ApprovalDecision,
    ApprovalGate,
    ApprovalRequest,
    ApprovalResult,
    AutoApprover,
)
from flowstate.graph.interrupt import InterruptController
from flowstate.graph.node import NodeContext, NodeSpec
from flowstate.graph.router import Router
from flowstate.graph.state_graph import GraphDefinition, StateGraph

__all__ = [
    # Channels
    "Channel",
    "ChannelStore",
    "append",
    "replace",
    # Node
    "NodeSpec",
    "NodeContext",
    # Edge
    "EdgeSpec",
    "EdgeKind",
    "END",
    "START",
    # Building and compiling
    "StateGraph",
    "GraphDefinition",
    "GraphCompiler",
    "CompiledGraph",
    "compile_graph",
    "Router",
    # Execution
    "GraphExecutor",
    "ExecutionResult",
    "StepRecord",
    "RunStatus",
    "InterruptController",
    # Errors
    "GraphError",
    "CompileError",
    "RoutingError",
    "NodeError",
    "UnknownChannelError",
    "StepBudgetExceeded",
    # HITL
    "ApprovalDecision",
    "ApprovalRequest",
    "ApprovalResult",
    "ApprovalGate",
    "AutoApprover",
]
