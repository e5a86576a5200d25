"""Revision materializer: detached git worktrees scoped to one run."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from flowdiff.models.flow_models import RevisionSnapshot
from flowdiff.stages.exceptions import WorktreeError
from flowdiff.utils.process import run_command

logger = logging.getLogger(__name__)


class RevisionMaterializer:
    """Creates and removes detached working copies of a repository."""

    def __init__(
        self,
        repo_path: str,
        git_bin: str = "git",
        timeout_seconds: float | None = None,
    ) -> None:
        self.repo_path = repo_path
        self.git_bin = git_bin
        self.timeout_seconds = timeout_seconds

    def create(self, revision: str, dest: str) -> RevisionSnapshot:
        """Check out revision into dest, detached from any branch.

        Raises:
            WorktreeError: If git cannot create the worktree.
        """
        result = run_command(
            [self.git_bin, "worktree", "add", "--detach", dest, revision],
            cwd=self.repo_path,
            timeout=self.timeout_seconds,
        )
        if not result.ok:
            message = result.stderr.strip() or f"exit code {result.exit_code}"
            raise WorktreeError(f"create worktree for {revision}: {message}")
        logger.debug("Created worktree for %s at %s", revision, dest)
        return RevisionSnapshot(revision=revision, path=str(Path(dest).resolve()))

    def remove(self, snapshot: RevisionSnapshot) -> None:
        """Force-remove a worktree. A worktree that is already gone is fine.

        Raises:
            WorktreeError: If git fails and the directory still exists.
        """
        result = run_command(
            [self.git_bin, "worktree", "remove", "--force", snapshot.path],
            cwd=self.repo_path,
            timeout=self.timeout_seconds,
        )
        if result.ok or not Path(snapshot.path).exists():
            logger.debug("Removed worktree %s", snapshot.path)
            return
        message = result.stderr.strip() or f"exit code {result.exit_code}"
        raise WorktreeError(f"remove worktree {snapshot.path}: {message}")

    @contextmanager
    def snapshot(self, revision: str, dest: str) -> Iterator[RevisionSnapshot]:
        """Yield a snapshot that is removed on every exit path.

        Removal failures are logged as warnings and never raised, so they
        cannot mask the run's own result.
        """
        snap = self.create(revision, dest)
        try:
            yield snap
        finally:
            try:
                self.remove(snap)
            except Exception as exc:
                logger.warning("%s", exc)
