"""Interpretation of fixed-width side-by-side diff output.

`diff --side-by-side --width=W` prints the left and right columns with a
single relationship marker between them:

    '|'  line changed on both sides
    '<'  line only on the left (base)
    '>'  line only on the right (head)

The marker always sits at column (W // 2) - 1, so it is located by position
rather than by scanning. A candidate is accepted only when whitespace flanks
it; a one-sided marker may also end the line. Columns are counted in code
points, so wide characters can push a line out of alignment. Such lines are
treated as unmarked.
"""

import html
from typing import NamedTuple

MARKERS = frozenset("|<>")
_BLANKS = (" ", "\t")


class SideBySideSegments(NamedTuple):
    left: str
    marker: str
    right: str


def marker_column(width: int) -> int:
    """Column index of the relationship marker for a display width."""
    return max(width // 2 - 1, 0)


def find_marker(line: str, width: int) -> tuple[int, str] | None:
    """Locate a true relationship marker in one side-by-side line.

    Returns:
        (index, marker) when the separator column holds a marker flanked by
        whitespace, otherwise None.
    """
    idx = marker_column(width)
    if idx == 0 or idx >= len(line):
        return None
    marker = line[idx]
    if marker not in MARKERS:
        return None
    if line[idx - 1] not in _BLANKS:
        return None
    if idx + 1 >= len(line):
        return (idx, marker) if marker in "<>" else None
    if line[idx + 1] not in _BLANKS:
        return None
    return idx, marker


def suppress_unchanged(diff_text: str, width: int) -> str:
    """Keep only lines that carry a marker, preserving their order."""
    if not diff_text:
        return diff_text
    kept = [line for line in diff_text.split("\n") if find_marker(line, width) is not None]
    return "\n".join(kept)


def split_line(line: str, width: int) -> SideBySideSegments | None:
    """Split a marked line into its left column, marker and right column."""
    found = find_marker(line, width)
    if found is None:
        return None
    idx, marker = found
    return SideBySideSegments(left=line[:idx], marker=marker, right=line[idx + 1 :])


def format_html_line(line: str, width: int) -> str:
    """Render one line as escaped HTML with left/right/sep spans.

    Lines without a marker (banners, headers, context) are escaped as is.
    """
    segments = split_line(line, width)
    if segments is None:
        return html.escape(line)

    left = html.escape(segments.left)
    right = html.escape(segments.right)
    marker = html.escape(segments.marker)
    if segments.marker == "|":
        return (
            f'<span class="left">{left}</span>'
            f'<span class="sep">{marker}</span>'
            f'<span class="right">{right}</span>'
        )
    if segments.marker == "<":
        return f'<span class="left">{left}{marker}</span>{right}'
    return f'{left}<span class="right">{marker}{right}</span>'


def format_html(diff_text: str, width: int) -> str:
    if not diff_text:
        return ""
    return "\n".join(format_html_line(line, width) for line in diff_text.split("\n"))
