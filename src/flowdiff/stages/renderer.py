"""Flow renderer: runs the converter with a directory-then-stream fallback."""

import logging
import os
import shutil
from enum import Enum
from pathlib import Path

from flowdiff.models.flow_models import RenderOutcome, RevisionSnapshot
from flowdiff.stages.exceptions import ConverterNotFoundError, FlowDiffError
from flowdiff.utils.process import CommandResult, run_command

logger = logging.getLogger(__name__)

DEFAULT_CONVERTER = "flow2apex"
FALLBACK_ARTIFACT_NAME = "generated.apex"


class RenderMode(str, Enum):
    DIRECTORY = "directory"  # <bin> <flow> -d <outdir>
    STREAM = "stream"  # <bin> <flow>, artifact on stdout


# Tried in order; the first successful mode wins.
RENDER_ATTEMPTS: tuple[RenderMode, ...] = (RenderMode.DIRECTORY, RenderMode.STREAM)


def resolve_converter_bin(value: str | None) -> str:
    """Resolve the converter executable.

    A value containing a path separator must point at an executable file.
    A bare name is looked up on PATH.

    Raises:
        ConverterNotFoundError: If nothing executable is found.
    """
    value = (value or "").strip() or DEFAULT_CONVERTER
    if "/" in value or os.sep in value:
        path = Path(value)
        if not path.is_file() or not os.access(path, os.X_OK):
            raise ConverterNotFoundError(f"FLOW2APEX_BIN is not executable: {value}")
        return value
    resolved = shutil.which(value)
    if resolved is None:
        raise ConverterNotFoundError(f"{value} binary not found on PATH")
    return resolved


class FlowRenderer:
    """Renders flow files through the external converter."""

    def __init__(self, converter_bin: str, timeout_seconds: float | None = None) -> None:
        self.converter_bin = converter_bin
        self.timeout_seconds = timeout_seconds

    def render(
        self, flow_path: str, snapshot: RevisionSnapshot, output_dir: str
    ) -> RenderOutcome:
        """Render flow_path as it exists in snapshot into output_dir.

        A flow absent from the snapshot was added or removed between the
        revisions and yields a FILE_MISSING outcome. Converter failures are
        returned as CONVERTER_FAILED with the stderr of every attempt.

        Raises:
            ToolLaunchError: If the converter cannot be started.
        """
        if not snapshot.has_file(flow_path):
            return RenderOutcome.file_missing()

        flow_file = str(snapshot.resolve(flow_path))
        Path(output_dir).mkdir(parents=True, exist_ok=True)

        logs: list[str] = []
        for mode in RENDER_ATTEMPTS:
            result = self._invoke(mode, flow_file, snapshot.path, output_dir)
            logs.append(result.stderr)
            if result.ok:
                if mode == RenderMode.STREAM:
                    self._write_stream_artifact(output_dir, result.stdout_bytes)
                    logger.info(
                        "Rendered %s at %s via stream fallback",
                        flow_path,
                        snapshot.revision,
                    )
                return RenderOutcome.rendered(output_dir, "".join(logs))
            logger.debug(
                "%s mode failed for %s at %s (exit %d)",
                mode.value,
                flow_path,
                snapshot.revision,
                result.exit_code,
            )

        return RenderOutcome.converter_failed("".join(logs))

    def _invoke(
        self, mode: RenderMode, flow_file: str, cwd: str, output_dir: str
    ) -> CommandResult:
        args = [self.converter_bin, flow_file]
        if mode == RenderMode.DIRECTORY:
            args += ["-d", output_dir]
        return run_command(args, cwd=cwd, timeout=self.timeout_seconds)

    def _write_stream_artifact(self, output_dir: str, content: bytes) -> None:
        """Replace whatever a failed directory attempt left with one artifact."""
        target = Path(output_dir) / FALLBACK_ARTIFACT_NAME
        try:
            shutil.rmtree(output_dir)
            Path(output_dir).mkdir(parents=True)
            target.write_bytes(content)
        except OSError as exc:
            raise FlowDiffError(f"write generated apex fallback: {exc}") from exc
