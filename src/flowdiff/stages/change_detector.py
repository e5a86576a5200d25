"""Change detector: which flow definitions changed between two revisions."""

import logging
import re

from flowdiff.stages.exceptions import ChangeDetectionError
from flowdiff.utils.process import run_command

logger = logging.getLogger(__name__)

FLOW_FILE_RE = re.compile(r"\.flow(-meta\.xml)?$")


def filter_flow_paths(lines: list[str]) -> list[str]:
    """Keep flow definition paths, drop blanks and duplicates, sort.

    Args:
        lines: Raw path lines from the version-control name-only diff.

    Returns:
        Lexicographically sorted, distinct flow paths.
    """
    flows = {
        line.strip()
        for line in lines
        if line.strip() and FLOW_FILE_RE.search(line.strip())
    }
    return sorted(flows)


class ChangeDetector:
    """Queries git for flow files added, modified, renamed or deleted."""

    def __init__(
        self,
        repo_path: str,
        git_bin: str = "git",
        timeout_seconds: float | None = None,
    ) -> None:
        self.repo_path = repo_path
        self.git_bin = git_bin
        self.timeout_seconds = timeout_seconds

    def detect(self, base_sha: str, head_sha: str) -> list[str]:
        """Return the changed flow paths between base_sha and head_sha.

        Raises:
            ChangeDetectionError: If a revision id is empty or git fails.
        """
        if not base_sha or not head_sha:
            raise ChangeDetectionError("base-sha and head-sha are required")

        result = run_command(
            [
                self.git_bin,
                "diff",
                "--name-only",
                "--no-renames",
                "--diff-filter=ACMRD",
                base_sha,
                head_sha,
            ],
            cwd=self.repo_path,
            timeout=self.timeout_seconds,
        )
        if not result.ok:
            message = result.stderr.strip() or f"exit code {result.exit_code}"
            raise ChangeDetectionError(f"detect changed files: {message}")

        flows = filter_flow_paths(result.stdout.splitlines())
        logger.info("Detected %d changed flow file(s)", len(flows))
        return flows
