"""Tests for the whole-run coordinator."""

import logging
import os
from contextlib import contextmanager
from unittest.mock import MagicMock

import pytest

from conftest import requires_gnu_diff
from flowdiff.models import (
    DiffFormat,
    DiffOutcome,
    RenderOutcome,
    ReportSettings,
    RevisionSnapshot,
    RunConfig,
)
from flowdiff.orchestrator.runner import run_flow_diff
from flowdiff.report.builder import comment_marker
from flowdiff.stages.exceptions import ChangeDetectionError, WorktreeError


def _config(tmp_path, fmt: DiffFormat = DiffFormat.UNIFIED, **overrides) -> RunConfig:
    values = {
        "base_sha": "base111",
        "head_sha": "head222",
        "workspace": str(tmp_path),
        "output_file": str(tmp_path / "out" / "step-output.txt"),
        "comment_file": str(tmp_path / ".github" / "comment.md"),
        "html_file": str(tmp_path / ".github" / "diff.html"),
        "diff_format": fmt,
        "settings": ReportSettings(timeout_seconds=60),
    }
    values.update(overrides)
    return RunConfig(**values)


def _read_outputs(config: RunConfig) -> list[str]:
    with open(config.output_file, encoding="utf-8") as f:
        return f.read().splitlines()


class FakeDetector:
    def __init__(self, flows):
        self.flows = flows

    def detect(self, base_sha, head_sha):
        return list(self.flows)


class FakeMaterializer:
    """Yields snapshots without git and records cleanup."""

    def __init__(self):
        self.removed = []

    @contextmanager
    def snapshot(self, revision, dest):
        os.makedirs(dest, exist_ok=True)
        try:
            yield RevisionSnapshot(revision=revision, path=dest)
        finally:
            self.removed.append(revision)


# ---------------------------------------------------------------------------
# No changed flows
# ---------------------------------------------------------------------------


class TestNoChanges:
    def test_writes_empty_comment_and_false_flag(self, tmp_path):
        config = _config(tmp_path)
        renderer = MagicMock()
        materializer = MagicMock()

        outputs = run_flow_diff(
            config,
            detector=FakeDetector([]),
            materializer=materializer,
            renderer=renderer,
            differ=MagicMock(),
        )

        assert not outputs.has_flow_changes
        assert open(config.comment_file).read() == ""
        assert _read_outputs(config) == [
            "has_flow_changes=false",
            f"comment_file={config.comment_file}",
            "html_file=",
        ]
        renderer.render.assert_not_called()
        materializer.snapshot.assert_not_called()

    def test_does_not_resolve_converter(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PATH", str(tmp_path))
        config = _config(tmp_path, converter_bin="")

        outputs = run_flow_diff(config, detector=FakeDetector([]))

        assert not outputs.has_flow_changes

    def test_side_by_side_reports_html_path(self, tmp_path):
        config = _config(tmp_path, DiffFormat.SIDE_BY_SIDE)

        outputs = run_flow_diff(config, detector=FakeDetector([]))

        assert outputs.html_file == config.html_file
        assert _read_outputs(config)[2] == f"html_file={config.html_file}"

    def test_appends_to_existing_outputs(self, tmp_path):
        config = _config(tmp_path)
        os.makedirs(os.path.dirname(config.output_file))
        with open(config.output_file, "w") as f:
            f.write("earlier=1\n")

        run_flow_diff(config, detector=FakeDetector([]))

        assert _read_outputs(config)[0] == "earlier=1"
        assert _read_outputs(config)[1] == "has_flow_changes=false"


# ---------------------------------------------------------------------------
# With fakes
# ---------------------------------------------------------------------------


class TestWithFakes:
    def test_full_run(self, tmp_path):
        config = _config(tmp_path)
        materializer = FakeMaterializer()
        renderer = MagicMock()
        renderer.render.side_effect = lambda flow, snap, out: RenderOutcome.rendered(out)
        differ = MagicMock()
        differ.diff.return_value = DiffOutcome.differs("-a\n+b\n")

        outputs = run_flow_diff(
            config,
            detector=FakeDetector(["flows/B.flow", "flows/C.flow"]),
            materializer=materializer,
            renderer=renderer,
            differ=differ,
        )

        assert outputs.has_flow_changes
        assert outputs.html_file == ""
        assert renderer.render.call_count == 4
        assert materializer.removed == ["head222", "base111"]
        body = open(config.comment_file).read()
        assert body.startswith(comment_marker(DiffFormat.UNIFIED))
        assert body.index("flows/B.flow") < body.index("flows/C.flow")
        assert not os.path.exists(config.html_file)
        assert _read_outputs(config)[0] == "has_flow_changes=true"

    def test_logs_recorded_section_count(self, tmp_path, caplog):
        renderer = MagicMock()
        renderer.render.side_effect = lambda flow, snap, out: RenderOutcome.rendered(out)
        differ = MagicMock()
        differ.diff.return_value = DiffOutcome.identical()

        with caplog.at_level(logging.INFO, logger="flowdiff.orchestrator.runner"):
            run_flow_diff(
                _config(tmp_path),
                detector=FakeDetector(["flows/A.flow", "flows/B.flow"]),
                materializer=FakeMaterializer(),
                renderer=renderer,
                differ=differ,
            )

        assert "Recorded 2 flow section(s)" in caplog.text

    def test_work_dir_removed_after_run(self, tmp_path):
        config = _config(tmp_path)
        seen = []
        renderer = MagicMock()

        def render(flow, snap, out):
            seen.append(out)
            return RenderOutcome.rendered(out)

        renderer.render.side_effect = render
        differ = MagicMock()
        differ.diff.return_value = DiffOutcome.identical()

        run_flow_diff(
            config,
            detector=FakeDetector(["flows/A.flow"]),
            materializer=FakeMaterializer(),
            renderer=renderer,
            differ=differ,
        )

        assert seen
        assert not any(os.path.exists(path) for path in seen)

    def test_fatal_stage_error_cleans_up_and_writes_nothing(self, tmp_path):
        config = _config(tmp_path)
        materializer = FakeMaterializer()
        renderer = MagicMock()
        renderer.render.side_effect = WorktreeError("boom")

        with pytest.raises(WorktreeError):
            run_flow_diff(
                config,
                detector=FakeDetector(["flows/A.flow"]),
                materializer=materializer,
                renderer=renderer,
                differ=MagicMock(),
            )

        assert materializer.removed == ["head222", "base111"]
        assert not os.path.exists(config.output_file)
        assert not os.path.exists(config.comment_file)

    def test_detection_error_propagates(self, tmp_path):
        detector = MagicMock()
        detector.detect.side_effect = ChangeDetectionError("detect changed files: bad")
        with pytest.raises(ChangeDetectionError):
            run_flow_diff(_config(tmp_path), detector=detector)


# ---------------------------------------------------------------------------
# End to end with git and the fake converter
# ---------------------------------------------------------------------------


def _seed_history(git_repo):
    git_repo.write("force-app/flows/Changed.flow-meta.xml", "<Flow>\n  <label>one</label>\n</Flow>\n")
    git_repo.write("force-app/flows/Removed.flow-meta.xml", "<Flow>removed</Flow>\n")
    git_repo.write("force-app/flows/Broken.flow-meta.xml", "<Flow>fine</Flow>\n")
    base = git_repo.commit("base")

    git_repo.write("force-app/flows/Changed.flow-meta.xml", "<Flow>\n  <label>two</label>\n</Flow>\n")
    git_repo.delete("force-app/flows/Removed.flow-meta.xml")
    git_repo.write("force-app/flows/Added.flow-meta.xml", "STREAM_ONLY\n")
    git_repo.write("force-app/flows/Broken.flow-meta.xml", "BROKEN\n")
    git_repo.write("README.md", "docs\n")
    head = git_repo.commit("head")
    return base, head


class TestEndToEnd:
    def test_unified_report(self, git_repo, fake_converter, tmp_path):
        base, head = _seed_history(git_repo)
        config = _config(
            git_repo.path,
            base_sha=base,
            head_sha=head,
            converter_bin=fake_converter,
        )

        outputs = run_flow_diff(config)

        assert outputs.has_flow_changes
        body = open(config.comment_file).read()
        for name in ("Added", "Broken", "Changed", "Removed"):
            assert f"### `force-app/flows/{name}.flow-meta.xml`" in body
        assert body.index("Added") < body.index("Broken") < body.index("Changed") < body.index("Removed")
        assert "-  <label>one</label>" in body
        assert "+  <label>two</label>" in body
        assert "- Base flow file missing (added in PR)" in body
        assert "- Head flow file missing (deleted in PR)" in body
        assert "- Head conversion failed" in body
        assert "cannot convert" in body
        assert "README" not in body
        assert "flow2apex-diff-" not in git_repo.worktrees()

    def test_paths_that_sanitize_alike_keep_separate_sections(self, git_repo, fake_converter):
        git_repo.write("a/b.flow", "<x>same</x>\n")
        base = git_repo.commit("base")
        git_repo.write("a/b.flow", "<x>changed</x>\n")
        git_repo.write("a_b.flow", "<x>new</x>\n")
        head = git_repo.commit("head")
        config = _config(git_repo.path, base_sha=base, head_sha=head, converter_bin=fake_converter)

        run_flow_diff(config)

        body = open(config.comment_file).read()
        first, second = body.split("### `a_b.flow`")
        assert "### `a/b.flow`" in first
        assert "+<x>changed</x>" in first
        assert "- Base flow file missing (added in PR)" in second
        assert "+public class a_b {" in second
        assert "public class b " not in second
        assert "<x>changed</x>" not in second

    @requires_gnu_diff
    def test_side_by_side_report(self, git_repo, fake_converter):
        base, head = _seed_history(git_repo)
        config = _config(
            git_repo.path,
            DiffFormat.SIDE_BY_SIDE,
            base_sha=base,
            head_sha=head,
            converter_bin=fake_converter,
        )

        outputs = run_flow_diff(config)

        assert outputs.html_file == config.html_file
        body = open(config.comment_file).read()
        assert body.startswith(comment_marker(DiffFormat.SIDE_BY_SIDE))
        assert "```text" in body
        doc = open(config.html_file).read()
        assert "<h2>force-app/flows/Changed.flow-meta.xml</h2>" in doc
        assert '<span class="sep">|</span>' in doc
        assert _read_outputs(config) == [
            "has_flow_changes=true",
            f"comment_file={config.comment_file}",
            f"html_file={config.html_file}",
        ]
