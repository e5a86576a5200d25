"""LangGraph loop that renders, diffs and records one flow at a time.

Edge topology:
  START -> conditional(next_flow_or_end) -> {render_node, END}
  render_node -> diff_node -> record_node
  record_node -> conditional(next_flow_or_end) -> {render_node, END}

Nodes never swallow exceptions: per-flow problems are already values
(RenderOutcome, DiffOutcome), so anything raised here is fatal to the run.
"""

import logging
import os
from typing import Callable

from langgraph.graph import END, START, StateGraph

from flowdiff.models import RevisionSnapshot
from flowdiff.orchestrator.exceptions import GraphBuildError, OrchestratorError
from flowdiff.orchestrator.routing import current_flow, next_flow_or_end, render_dirs
from flowdiff.orchestrator.state import FlowDiffState
from flowdiff.report.builder import ReportBuilder
from flowdiff.stages.base import Differ, Renderer

logger = logging.getLogger(__name__)


def _require_flow(state: FlowDiffState, node: str) -> str:
    flow_path = current_flow(state)
    if flow_path is None:
        raise OrchestratorError(
            f"{node}: current_flow_index {state['current_flow_index']} out of range"
        )
    return flow_path


def make_render_node(
    renderer: Renderer,
    base_snapshot: RevisionSnapshot,
    head_snapshot: RevisionSnapshot,
    work_dir: str,
) -> Callable[[FlowDiffState], dict]:
    """Factory: returns a node closure that renders the current flow twice
    into two fresh directories.

    Returns {"base_outcome": ..., "head_outcome": ...}.
    """

    def render_node(state: FlowDiffState) -> dict:
        flow_path = _require_flow(state, "render_node")
        base_dir, head_dir = render_dirs(work_dir, state["current_flow_index"], flow_path)
        os.makedirs(base_dir)
        os.makedirs(head_dir)

        logger.debug("Rendering %s", flow_path)
        return {
            "base_outcome": renderer.render(flow_path, base_snapshot, base_dir),
            "head_outcome": renderer.render(flow_path, head_snapshot, head_dir),
        }

    return render_node


def make_diff_node(differ: Differ, work_dir: str) -> Callable[[FlowDiffState], dict]:
    """Factory: returns a node closure that diffs the current flow's renders."""

    def diff_node(state: FlowDiffState) -> dict:
        flow_path = _require_flow(state, "diff_node")
        base_dir, head_dir = render_dirs(work_dir, state["current_flow_index"], flow_path)
        return {"diff_outcome": differ.diff(flow_path, base_dir, head_dir)}

    return diff_node


def make_record_node(builder: ReportBuilder) -> Callable[[FlowDiffState], dict]:
    """Factory: returns a node closure that appends the flow's report section
    and advances the loop."""

    def record_node(state: FlowDiffState) -> dict:
        flow_path = _require_flow(state, "record_node")
        base = state["base_outcome"]
        head = state["head_outcome"]
        diff = state["diff_outcome"]
        if base is None or head is None or diff is None:
            raise OrchestratorError(f"record_node: missing outcomes for {flow_path}")

        builder.add_flow(flow_path, base, head, diff)
        return {
            "recorded_flows": [flow_path],
            "current_flow_index": state["current_flow_index"] + 1,
            "base_outcome": None,
            "head_outcome": None,
            "diff_outcome": None,
        }

    return record_node


def build_graph(
    renderer: Renderer,
    differ: Differ,
    builder: ReportBuilder,
    base_snapshot: RevisionSnapshot,
    head_snapshot: RevisionSnapshot,
    work_dir: str,
):
    """Build and compile the per-flow StateGraph.

    No checkpointer; state lives in memory for one run.

    Returns:
        CompiledStateGraph ready to invoke.

    Raises:
        GraphBuildError: If graph construction fails.
    """
    try:
        graph = StateGraph(FlowDiffState)

        graph.add_node(
            "render_node",
            make_render_node(renderer, base_snapshot, head_snapshot, work_dir),
        )
        graph.add_node("diff_node", make_diff_node(differ, work_dir))
        graph.add_node("record_node", make_record_node(builder))

        graph.add_conditional_edges(
            START,
            next_flow_or_end,
            {
                "continue": "render_node",
                "done": END,
            },
        )
        graph.add_edge("render_node", "diff_node")
        graph.add_edge("diff_node", "record_node")
        graph.add_conditional_edges(
            "record_node",
            next_flow_or_end,
            {
                "continue": "render_node",
                "done": END,
            },
        )

        return graph.compile()

    except Exception as exc:
        raise GraphBuildError(f"Failed to build flow diff graph: {exc}") from exc
