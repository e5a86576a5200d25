"""LangGraph orchestration of the flow diff run."""

from flowdiff.orchestrator.exceptions import GraphBuildError, OrchestratorError
from flowdiff.orchestrator.graph import build_graph
from flowdiff.orchestrator.runner import run_flow_diff
from flowdiff.orchestrator.state import FlowDiffState, make_initial_state

__all__ = [
    "FlowDiffState",
    "GraphBuildError",
    "OrchestratorError",
    "build_graph",
    "make_initial_state",
    "run_flow_diff",
]
