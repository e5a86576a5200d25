"""Markdown and HTML report assembly."""

from flowdiff.report.builder import ReportBuilder, comment_marker, truncate_text, write_artifact

__all__ = [
    "ReportBuilder",
    "comment_marker",
    "truncate_text",
    "write_artifact",
]
