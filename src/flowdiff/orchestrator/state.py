"""State definition for the per-flow LangGraph pipeline."""

import operator
from typing import Annotated, TypedDict

from flowdiff.models import DiffOutcome, RenderOutcome


class FlowDiffState(TypedDict):
    """State for the flow diff loop.

    The outcome fields hold the current flow's transient results and are
    cleared once the flow is recorded. recorded_flows accumulates.
    """

    # Input
    flows: list[str]

    # Loop position
    current_flow_index: int

    # Current flow
    base_outcome: RenderOutcome | None
    head_outcome: RenderOutcome | None
    diff_outcome: DiffOutcome | None

    # Accumulating reducer
    recorded_flows: Annotated[list[str], operator.add]


def make_initial_state(flows: list[str]) -> FlowDiffState:
    """Create the initial loop state for an ordered list of flow paths."""
    return {
        "flows": list(flows),
        "current_flow_index": 0,
        "base_outcome": None,
        "head_outcome": None,
        "diff_outcome": None,
        "recorded_flows": [],
    }
