"""Persistence for step outputs consumed by the invoking CI job."""

import logging
from pathlib import Path

from flowdiff.models.report_models import RunOutputs
from flowdiff.stages.exceptions import ReportWriteError

logger = logging.getLogger(__name__)


def append_outputs(path: str, outputs: RunOutputs) -> None:
    """Append outputs to path as key=value lines, creating it if needed.

    Raises:
        ReportWriteError: If the file cannot be opened or written.
    """
    output_path = Path(path)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "a", encoding="utf-8") as f:
            for key, value in outputs.as_pairs():
                f.write(f"{key}={value}\n")
    except OSError as exc:
        raise ReportWriteError(f"write step outputs to {path}: {exc}") from exc
    logger.debug("Appended step outputs to %s", path)
