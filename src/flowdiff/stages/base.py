"""Narrow interfaces over the external tools the pipeline drives.

The orchestrator only talks to these protocols, so tests can substitute
fakes that never spawn a process.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Protocol, runtime_checkable

from ..models.flow_models import DiffOutcome, RenderOutcome, RevisionSnapshot


@runtime_checkable
class RevisionSource(Protocol):
    """Lists changed flows between two revisions of a repository."""

    def detect(self, base_sha: str, head_sha: str) -> list[str]:
        """Sorted, de-duplicated flow paths changed between the revisions."""


@runtime_checkable
class Renderer(Protocol):
    """Converts one flow file in one snapshot into generated artifacts."""

    def render(
        self, flow_path: str, snapshot: RevisionSnapshot, output_dir: str
    ) -> RenderOutcome:
        """Render flow_path from snapshot into output_dir."""


@runtime_checkable
class Differ(Protocol):
    """Compares the base and head render directories of one flow."""

    def diff(self, flow_path: str, base_dir: str, head_dir: str) -> DiffOutcome:
        """Classify and capture the differences between two directories."""


@runtime_checkable
class SnapshotProvider(Protocol):
    """Materializes revisions as run-scoped, self-cleaning working copies."""

    def snapshot(
        self, revision: str, dest: str
    ) -> AbstractContextManager[RevisionSnapshot]:
        """Context manager yielding a snapshot that is removed on exit."""
