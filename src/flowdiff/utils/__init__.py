"""Utilities for flowdiff."""

from flowdiff.utils.outputs import append_outputs
from flowdiff.utils.process import CommandResult, run_command
from flowdiff.utils.side_by_side import (
    find_marker,
    format_html,
    format_html_line,
    marker_column,
    split_line,
    suppress_unchanged,
)

__all__ = [
    "CommandResult",
    "append_outputs",
    "find_marker",
    "format_html",
    "format_html_line",
    "marker_column",
    "run_command",
    "split_line",
    "suppress_unchanged",
]
