"""Pipeline stages that drive git, diff and the flow converter."""

from flowdiff.stages.exceptions import (
    ChangeDetectionError,
    ConverterNotFoundError,
    DiffOptionsUnsupportedError,
    FlowDiffError,
    InvalidDiffFormatError,
    ReportWriteError,
    ToolLaunchError,
    WorktreeError,
)
from flowdiff.stages.base import Differ, Renderer, RevisionSource, SnapshotProvider
from flowdiff.stages.change_detector import ChangeDetector
from flowdiff.stages.differ import DiffEngine, normalize_diff_format
from flowdiff.stages.materializer import RevisionMaterializer
from flowdiff.stages.renderer import FlowRenderer, resolve_converter_bin

__all__ = [
    "ChangeDetectionError",
    "ChangeDetector",
    "ConverterNotFoundError",
    "DiffEngine",
    "DiffOptionsUnsupportedError",
    "Differ",
    "FlowDiffError",
    "FlowRenderer",
    "InvalidDiffFormatError",
    "Renderer",
    "ReportWriteError",
    "RevisionMaterializer",
    "RevisionSource",
    "SnapshotProvider",
    "ToolLaunchError",
    "WorktreeError",
    "normalize_diff_format",
    "resolve_converter_bin",
]
