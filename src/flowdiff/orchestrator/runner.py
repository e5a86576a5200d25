"""Whole-run coordination: detect, materialize, loop over flows, publish."""

import logging
import os
import shutil
import tempfile
from contextlib import ExitStack
from pathlib import Path

from flowdiff.models import DiffFormat, RunConfig, RunOutputs
from flowdiff.orchestrator.exceptions import OrchestratorError
from flowdiff.orchestrator.graph import build_graph
from flowdiff.orchestrator.routing import recursion_limit_for
from flowdiff.orchestrator.state import make_initial_state
from flowdiff.report.builder import ReportBuilder, write_artifact
from flowdiff.stages.base import Differ, Renderer, RevisionSource, SnapshotProvider
from flowdiff.stages.change_detector import ChangeDetector
from flowdiff.stages.differ import DiffEngine
from flowdiff.stages.exceptions import ReportWriteError, WorktreeError
from flowdiff.stages.materializer import RevisionMaterializer
from flowdiff.stages.renderer import FlowRenderer, resolve_converter_bin
from flowdiff.utils.outputs import append_outputs

logger = logging.getLogger(__name__)

WORK_DIR_PREFIX = "flow2apex-diff-"


def _ensure_parent(path: str) -> None:
    try:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ReportWriteError(f"create directory for {path}: {exc}") from exc


def run_flow_diff(
    config: RunConfig,
    *,
    detector: RevisionSource | None = None,
    materializer: SnapshotProvider | None = None,
    renderer: Renderer | None = None,
    differ: Differ | None = None,
) -> RunOutputs:
    """Produce the flow diff report for config.base_sha..config.head_sha.

    Collaborators default to the git/diff/converter backed implementations;
    tests pass fakes instead.

    Returns:
        The RunOutputs appended to config.output_file.

    Raises:
        FlowDiffError: On any fatal run-level failure.
        OrchestratorError: If the flow loop cannot be built or advanced.
    """
    settings = config.settings
    side_by_side = config.diff_format == DiffFormat.SIDE_BY_SIDE
    html_output = config.html_file if side_by_side else ""

    _ensure_parent(config.comment_file)
    if side_by_side:
        _ensure_parent(config.html_file)

    detector = detector or ChangeDetector(
        config.workspace, timeout_seconds=settings.timeout_seconds
    )
    flows = detector.detect(config.base_sha, config.head_sha)
    if not flows:
        write_artifact(config.comment_file, "")
        outputs = RunOutputs(
            has_flow_changes=False,
            comment_file=config.comment_file,
            html_file=html_output,
        )
        append_outputs(config.output_file, outputs)
        return outputs

    if renderer is None:
        renderer = FlowRenderer(
            resolve_converter_bin(config.converter_bin),
            timeout_seconds=settings.timeout_seconds,
        )
    differ = differ or DiffEngine(config.diff_format, settings, workspace=config.workspace)
    materializer = materializer or RevisionMaterializer(
        config.workspace, timeout_seconds=settings.timeout_seconds
    )
    builder = ReportBuilder(config.diff_format, config.base_sha, config.head_sha, settings)
    logger.info("Rendering %d flow(s) with %s diffs", len(flows), config.diff_format.value)

    # Callbacks unwind in reverse: head worktree, base worktree, work dir.
    with ExitStack() as stack:
        try:
            work_dir = tempfile.mkdtemp(prefix=WORK_DIR_PREFIX)
        except OSError as exc:
            raise WorktreeError(f"create temp dir: {exc}") from exc
        stack.callback(shutil.rmtree, work_dir, ignore_errors=True)

        base_snapshot = stack.enter_context(
            materializer.snapshot(config.base_sha, os.path.join(work_dir, "base-checkout"))
        )
        head_snapshot = stack.enter_context(
            materializer.snapshot(config.head_sha, os.path.join(work_dir, "head-checkout"))
        )

        graph = build_graph(renderer, differ, builder, base_snapshot, head_snapshot, work_dir)
        result = graph.invoke(
            make_initial_state(flows),
            config={"recursion_limit": recursion_limit_for(flows)},
        )

    recorded = result["recorded_flows"]
    if len(recorded) != len(flows):
        raise OrchestratorError(f"recorded {len(recorded)} of {len(flows)} changed flow(s)")
    logger.info("Recorded %d flow section(s)", len(recorded))

    builder.write(config.comment_file, config.html_file)
    outputs = RunOutputs(
        has_flow_changes=True,
        comment_file=config.comment_file,
        html_file=html_output,
    )
    append_outputs(config.output_file, outputs)
    return outputs
