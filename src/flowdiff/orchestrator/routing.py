"""Pure helpers for walking the flow list.

All functions are stateless and have no external dependencies.
"""

import os

from flowdiff.orchestrator.state import FlowDiffState

# Supersteps per flow: render, diff, record.
STEPS_PER_FLOW = 3
RECURSION_HEADROOM = 5

_UNSAFE_PATH_CHARS = str.maketrans({c: "_" for c in "/ \t\n:"})


def sanitize_flow_path(flow_path: str) -> str:
    """Flatten a flow path into a single directory-name component."""
    return flow_path.translate(_UNSAFE_PATH_CHARS)


def render_dirs(work_dir: str, flow_index: int, flow_path: str) -> tuple[str, str]:
    """Return the (base, head) render output directories for a flow.

    The loop index prefix keeps paths that sanitize alike (a/b.flow and
    a_b.flow) in separate directories.
    """
    safe = sanitize_flow_path(flow_path)
    return (
        os.path.join(work_dir, f"{flow_index:04d}-base-render-{safe}"),
        os.path.join(work_dir, f"{flow_index:04d}-head-render-{safe}"),
    )


def current_flow(state: FlowDiffState) -> str | None:
    """Return the flow at current_flow_index, or None past the end."""
    idx = state["current_flow_index"]
    flows = state["flows"]
    if 0 <= idx < len(flows):
        return flows[idx]
    return None


def next_flow_or_end(state: FlowDiffState) -> str:
    """Router: "continue" while flows remain, "done" otherwise."""
    if current_flow(state) is not None:
        return "continue"
    return "done"


def recursion_limit_for(flows: list[str]) -> int:
    """Graph recursion limit large enough to visit every flow once."""
    return STEPS_PER_FLOW * len(flows) + RECURSION_HEADROOM
