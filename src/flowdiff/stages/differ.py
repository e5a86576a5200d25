"""Diff engine: unified (git --no-index) or side-by-side (diff -y) comparison."""

import logging
import re

from flowdiff.models.config_models import ReportSettings
from flowdiff.models.flow_models import DiffFormat, DiffOutcome, DiffStatus
from flowdiff.stages.exceptions import DiffOptionsUnsupportedError, InvalidDiffFormatError
from flowdiff.utils.process import CommandResult, run_command

logger = logging.getLogger(__name__)

EXIT_IDENTICAL = 0
EXIT_DIFFERS = 1

UNSUPPORTED_OPTION_MARKERS = (
    "unrecognized option",
    "illegal option",
    "unknown option",
)
SIDE_BY_SIDE_BANNER = "diff --recursive --side-by-side "

# Tab expansion is requested first; the second attempt drops it for diff
# builds that reject --expand-tabs.
SIDE_BY_SIDE_ATTEMPTS: tuple[bool, ...] = (True, False)


def normalize_diff_format(value: str | None) -> DiffFormat:
    """Parse a diff format selector. Empty means unified.

    Raises:
        InvalidDiffFormatError: If the selector is not recognized.
    """
    normalized = (value or "").strip().lower()
    if normalized in ("", DiffFormat.UNIFIED.value):
        return DiffFormat.UNIFIED
    if normalized == DiffFormat.SIDE_BY_SIDE.value:
        return DiffFormat.SIDE_BY_SIDE
    raise InvalidDiffFormatError(
        f"invalid diff-format {value!r} "
        f"(expected {DiffFormat.UNIFIED.value!r} or {DiffFormat.SIDE_BY_SIDE.value!r})"
    )


def option_unsupported(stderr_text: str) -> bool:
    lower = stderr_text.lower()
    return any(marker in lower for marker in UNSUPPORTED_OPTION_MARKERS)


def rewrite_paths(diff_text: str, flow_path: str, base_dir: str, head_dir: str) -> str:
    """Replace absolute render directories with a/<flow> and b/<flow> labels."""
    replacements = {base_dir: f"a/{flow_path}", head_dir: f"b/{flow_path}"}
    # Longest first so one directory that prefixes the other is matched whole.
    pattern = re.compile(
        "|".join(re.escape(p) for p in sorted(replacements, key=len, reverse=True))
    )
    return pattern.sub(lambda m: replacements[m.group(0)], diff_text)


def strip_command_banners(diff_text: str) -> str:
    """Drop the command echo lines diff prints before each compared file pair."""
    if not diff_text:
        return diff_text
    lines = diff_text.split("\n")
    return "\n".join(line for line in lines if not line.startswith(SIDE_BY_SIDE_BANNER))


def classify_exit(result: CommandResult) -> DiffOutcome:
    if result.exit_code == EXIT_IDENTICAL:
        return DiffOutcome.identical()
    if result.exit_code == EXIT_DIFFERS:
        return DiffOutcome.differs(result.stdout)
    return DiffOutcome.tooling_error()


class DiffEngine:
    """Diffs render directories in the run's single diff format."""

    def __init__(
        self,
        diff_format: DiffFormat,
        settings: ReportSettings | None = None,
        workspace: str | None = None,
        git_bin: str = "git",
        diff_bin: str = "diff",
    ) -> None:
        self.diff_format = diff_format
        self.settings = settings or ReportSettings()
        self.workspace = workspace
        self.git_bin = git_bin
        self.diff_bin = diff_bin

    def diff(self, flow_path: str, base_dir: str, head_dir: str) -> DiffOutcome:
        """Compare base_dir with head_dir for flow_path.

        Raises:
            ToolLaunchError: If git or diff cannot be started.
            DiffOptionsUnsupportedError: If diff rejects every side-by-side
                option set.
        """
        if self.diff_format == DiffFormat.SIDE_BY_SIDE:
            return self._diff_side_by_side(flow_path, base_dir, head_dir)
        return self._diff_unified(flow_path, base_dir, head_dir)

    def _diff_unified(self, flow_path: str, base_dir: str, head_dir: str) -> DiffOutcome:
        result = run_command(
            [
                self.git_bin,
                "diff",
                "--no-index",
                f"--src-prefix=a/{flow_path}/",
                f"--dst-prefix=b/{flow_path}/",
                "--",
                base_dir,
                head_dir,
            ],
            cwd=self.workspace,
            timeout=self.settings.timeout_seconds,
        )
        return classify_exit(result)

    def _diff_side_by_side(self, flow_path: str, base_dir: str, head_dir: str) -> DiffOutcome:
        for expand_tabs in SIDE_BY_SIDE_ATTEMPTS:
            result = run_command(
                self.side_by_side_args(base_dir, head_dir, expand_tabs),
                cwd=self.workspace,
                timeout=self.settings.timeout_seconds,
            )
            if result.exit_code not in (EXIT_IDENTICAL, EXIT_DIFFERS) and option_unsupported(
                result.stderr
            ):
                logger.info(
                    "diff rejected side-by-side options (expand_tabs=%s): %s",
                    expand_tabs,
                    result.stderr.strip(),
                )
                continue

            outcome = classify_exit(result)
            if outcome.status != DiffStatus.DIFFERS:
                return outcome
            text = rewrite_paths(outcome.diff_text, flow_path, base_dir, head_dir)
            return DiffOutcome.differs(strip_command_banners(text))

        raise DiffOptionsUnsupportedError(
            "generate side-by-side diff output: diff options are not supported"
        )

    def side_by_side_args(self, base_dir: str, head_dir: str, expand_tabs: bool) -> list[str]:
        args = [
            self.diff_bin,
            "--recursive",
            "--side-by-side",
            "--new-file",
            f"--width={self.settings.side_by_side_width}",
            f"--tabsize={self.settings.tab_size}",
        ]
        if expand_tabs:
            args.append("--expand-tabs")
        args += [base_dir, head_dir]
        return args
