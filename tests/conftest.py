import shutil
import stat
import subprocess
from pathlib import Path

import pytest


def _gnu_diff_available() -> bool:
    if shutil.which("diff") is None:
        return False
    result = subprocess.run(["diff", "--version"], capture_output=True, text=True)
    return "GNU" in result.stdout


requires_gnu_diff = pytest.mark.skipif(not _gnu_diff_available(), reason="GNU diff not installed")


FAKE_CONVERTER = """#!/bin/sh
# Fake flow2apex: wraps the flow file in a class.
#   BROKEN      -> fails in both modes
#   STREAM_ONLY -> fails in directory mode, works in stream mode
flow="$1"
name=$(basename "$flow" | sed 's/\\..*//')
if grep -q BROKEN "$flow"; then
  echo "cannot convert $flow" >&2
  exit 1
fi
if [ "$2" = "-d" ]; then
  if grep -q STREAM_ONLY "$flow"; then
    echo "directory output unsupported for $name" >&2
    exit 3
  fi
  { echo "public class $name {"; cat "$flow"; echo "}"; } > "$3/$name.cls"
  exit 0
fi
echo "public class $name {"
cat "$flow"
echo "}"
"""


def _git(repo: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=repo,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def make_side_by_side_line(left: str, marker: str, right: str, width: int) -> str:
    """Lay out a line the way diff --side-by-side --width=width does."""
    column = width // 2 - 1
    left_col = left[: column - 1].ljust(column)
    line = left_col + marker
    if right:
        line += " " + right
    return line


@pytest.fixture
def sbs_line():
    return make_side_by_side_line


@pytest.fixture
def fake_converter(tmp_path):
    script = tmp_path / "bin" / "flow2apex"
    script.parent.mkdir()
    script.write_text(FAKE_CONVERTER)
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(script)


class GitRepo:
    """Small helper around a throwaway repository."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def write(self, relative_path: str, content: str) -> None:
        target = self.path / relative_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)

    def delete(self, relative_path: str) -> None:
        (self.path / relative_path).unlink()

    def commit(self, message: str) -> str:
        _git(self.path, "add", "-A")
        _git(self.path, "commit", "-q", "--allow-empty", "-m", message)
        return _git(self.path, "rev-parse", "HEAD")

    def worktrees(self) -> str:
        return _git(self.path, "worktree", "list")


@pytest.fixture
def git_repo(tmp_path):
    if shutil.which("git") is None:
        pytest.skip("git not installed")
    repo_path = tmp_path / "repo"
    repo_path.mkdir()
    _git(repo_path, "init", "-q")
    _git(repo_path, "config", "user.email", "test@example.com")
    _git(repo_path, "config", "user.name", "Test User")
    _git(repo_path, "config", "commit.gpgsign", "false")
    return GitRepo(repo_path)


@pytest.fixture(autouse=True)
def _isolate_ci_env(monkeypatch):
    for name in ("BASE_SHA", "HEAD_SHA", "GITHUB_WORKSPACE", "GITHUB_OUTPUT", "FLOW2APEX_BIN", "DIFF_FORMAT"):
        monkeypatch.delenv(name, raising=False)
    yield
