"""Run-level exceptions. Anything raised from here aborts the run."""


class FlowDiffError(Exception):
    """Base exception for all fatal flowdiff errors."""


class InvalidDiffFormatError(FlowDiffError):
    """Raised when the diff format selector is not recognized."""


class ChangeDetectionError(FlowDiffError):
    """Raised when the changed-file query fails or is given empty revisions."""


class WorktreeError(FlowDiffError):
    """Raised when a detached working copy cannot be created."""


class ToolLaunchError(FlowDiffError):
    """Raised when an external executable cannot be started at all."""


class ConverterNotFoundError(ToolLaunchError):
    """Raised when the converter binary cannot be resolved."""


class DiffOptionsUnsupportedError(FlowDiffError):
    """Raised when the diff tool rejects every side-by-side option set."""


class ReportWriteError(FlowDiffError):
    """Raised when a report artifact or the step output file cannot be written."""
