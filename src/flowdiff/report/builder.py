"""Report builder: Markdown PR comment plus optional side-by-side HTML."""

import html
import logging
from pathlib import Path

from flowdiff.models.config_models import ReportSettings
from flowdiff.models.flow_models import DiffFormat, DiffOutcome, DiffStatus, RenderOutcome
from flowdiff.report.html_template import document_head, document_tail
from flowdiff.stages.exceptions import ReportWriteError
from flowdiff.utils.side_by_side import format_html, suppress_unchanged

logger = logging.getLogger(__name__)

REPORT_TITLE = "## flow2apex Flow Diffs"
NO_DIFFERENCES_NOTICE = "No generated Apex differences."
DIFF_FAILED_NOTICE = "Failed to generate diff output."
DIFF_TRUNCATED_NOTICE = "\n...diff truncated..."
LOG_TRUNCATED_NOTICE = "\n...log truncated..."
COMMENT_TRUNCATED_NOTICE = "\n...comment truncated due to size limit...\n"


def comment_marker(diff_format: DiffFormat) -> str:
    """Hidden marker that lets a CI job find and update its own comment."""
    return f"<!-- flow2apex-diff-comment:{diff_format.value} -->"


def truncate_text(text: str, limit: int, notice: str) -> str:
    """Cut text to limit characters, appending notice when anything was cut."""
    if len(text) <= limit:
        return text
    return text[:limit] + notice


def _ensure_newline(text: str) -> str:
    return text if text.endswith("\n") else text + "\n"


class ReportBuilder:
    """Accumulates per-flow sections in the order flows are processed.

    Both bodies are append-only; size caps apply once, when the Markdown
    body is read.
    """

    def __init__(
        self,
        diff_format: DiffFormat,
        base_sha: str,
        head_sha: str,
        settings: ReportSettings | None = None,
    ) -> None:
        self.diff_format = diff_format
        self.settings = settings or ReportSettings()
        self._markdown: list[str] = [
            comment_marker(diff_format),
            "\n",
            f"{REPORT_TITLE}\n\n",
            f"Compared generated Apex between base `{base_sha}` and head "
            f"`{head_sha}` for changed flow files.\n\n",
            f"Diff format: `{diff_format.value}`.\n\n",
        ]
        self._html: list[str] = []
        if self.side_by_side:
            self._html.append(document_head(base_sha, head_sha))

    @property
    def side_by_side(self) -> bool:
        return self.diff_format == DiffFormat.SIDE_BY_SIDE

    def add_flow(
        self,
        flow_path: str,
        base: RenderOutcome,
        head: RenderOutcome,
        diff: DiffOutcome,
    ) -> None:
        """Append the heading, render status and diff block for one flow."""
        self._markdown.append(f"### `{flow_path}`\n\n")
        self._markdown.append(self._status_block(base, head))

        if diff.status == DiffStatus.DIFFERS:
            self._append_diff(flow_path, diff.diff_text)
        elif diff.status == DiffStatus.IDENTICAL:
            self._append_notice(flow_path, NO_DIFFERENCES_NOTICE)
        else:
            self._append_notice(flow_path, DIFF_FAILED_NOTICE)

    def _status_block(self, base: RenderOutcome, head: RenderOutcome) -> str:
        if not (base.failed or base.missing or head.failed or head.missing):
            return ""

        lines = ["Conversion issues:\n\n"]
        if base.failed:
            lines.append("- Base conversion failed\n")
        elif base.missing:
            lines.append("- Base flow file missing (added in PR)\n")
        if head.failed:
            lines.append("- Head conversion failed\n")
        elif head.missing:
            lines.append("- Head flow file missing (deleted in PR)\n")
        lines.append("\n")

        if base.log or head.log:
            lines.append("```text\n")
            for label, log in (("base", base.log), ("head", head.log)):
                if log:
                    lines.append(f"[{label}]\n")
                    limit = self.settings.max_error_chars
                    lines.append(_ensure_newline(truncate_text(log, limit, LOG_TRUNCATED_NOTICE)))
            lines.append("```\n\n")
        return "".join(lines)

    def _append_diff(self, flow_path: str, diff_text: str) -> None:
        width = self.settings.side_by_side_width
        comment_text = diff_text
        if self.side_by_side:
            comment_text = suppress_unchanged(diff_text, width)
            self._html.append(f"    <h2>{html.escape(flow_path)}</h2>\n")
            self._html.append('    <pre class="sbs"><span class="sbs-scale">')
            self._html.append(format_html(diff_text, width))
            self._html.append("</span></pre>\n")

        comment_text = truncate_text(
            comment_text, self.settings.max_diff_chars, DIFF_TRUNCATED_NOTICE
        )
        fence = "text" if self.side_by_side else "diff"
        self._markdown.append(f"```{fence}\n")
        self._markdown.append(_ensure_newline(comment_text))
        self._markdown.append("```\n\n")

    def _append_notice(self, flow_path: str, notice: str) -> None:
        self._markdown.append(f"{notice}\n\n")
        if self.side_by_side:
            self._html.append(f"    <h2>{html.escape(flow_path)}</h2>\n")
            self._html.append(f"    <p>{notice}</p>\n")

    def markdown_body(self) -> str:
        """The comment body, capped at max_comment_chars plus a notice."""
        return truncate_text(
            "".join(self._markdown),
            self.settings.max_comment_chars,
            COMMENT_TRUNCATED_NOTICE,
        )

    def html_body(self) -> str | None:
        """The full HTML document, or None outside side-by-side mode."""
        if not self.side_by_side:
            return None
        return "".join(self._html) + document_tail()

    def write(self, comment_file: str, html_file: str | None = None) -> None:
        """Persist the Markdown body and, in side-by-side mode, the HTML.

        Raises:
            ReportWriteError: If either artifact cannot be written.
        """
        write_artifact(comment_file, self.markdown_body())
        logger.info("Wrote PR comment to %s", comment_file)

        body = self.html_body()
        if body is not None and html_file:
            write_artifact(html_file, body)
            logger.info("Wrote side-by-side report to %s", html_file)


def write_artifact(path: str, content: str) -> None:
    """Write a UTF-8 report artifact, wrapping OS errors as ReportWriteError."""
    try:
        Path(path).write_text(content, encoding="utf-8")
    except OSError as exc:
        raise ReportWriteError(f"write {path}: {exc}") from exc
