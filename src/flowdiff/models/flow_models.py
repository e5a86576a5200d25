"""Per-flow value models: diff format, render and diff outcomes, snapshots."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict


class DiffFormat(str, Enum):
    """Textual form used for every diff in one run."""

    UNIFIED = "unified"
    SIDE_BY_SIDE = "side-by-side"


class RenderStatus(str, Enum):
    RENDERED = "rendered"
    CONVERTER_FAILED = "converter_failed"
    FILE_MISSING = "file_missing"


class RenderOutcome(BaseModel):
    """Result of rendering one flow file at one revision."""

    model_config = ConfigDict(frozen=True)

    status: RenderStatus
    output_dir: str | None = None  # Set only when status is RENDERED
    log: str = ""  # Converter stderr from every attempt that ran

    @classmethod
    def rendered(cls, output_dir: str, log: str = "") -> "RenderOutcome":
        return cls(status=RenderStatus.RENDERED, output_dir=output_dir, log=log)

    @classmethod
    def converter_failed(cls, log: str) -> "RenderOutcome":
        return cls(status=RenderStatus.CONVERTER_FAILED, log=log)

    @classmethod
    def file_missing(cls) -> "RenderOutcome":
        return cls(status=RenderStatus.FILE_MISSING)

    @property
    def failed(self) -> bool:
        return self.status == RenderStatus.CONVERTER_FAILED

    @property
    def missing(self) -> bool:
        return self.status == RenderStatus.FILE_MISSING


class DiffStatus(str, Enum):
    IDENTICAL = "identical"
    DIFFERS = "differs"
    TOOLING_ERROR = "tooling_error"


class DiffOutcome(BaseModel):
    """Result of comparing the base and head render directories of one flow."""

    model_config = ConfigDict(frozen=True)

    status: DiffStatus
    diff_text: str = ""  # Populated only when status is DIFFERS

    @classmethod
    def identical(cls) -> "DiffOutcome":
        return cls(status=DiffStatus.IDENTICAL)

    @classmethod
    def differs(cls, diff_text: str) -> "DiffOutcome":
        return cls(status=DiffStatus.DIFFERS, diff_text=diff_text)

    @classmethod
    def tooling_error(cls) -> "DiffOutcome":
        return cls(status=DiffStatus.TOOLING_ERROR)


class RevisionSnapshot(BaseModel):
    """A detached working copy of the repository at one revision."""

    model_config = ConfigDict(frozen=True)

    revision: str
    path: str  # Absolute path of the working copy root

    def resolve(self, relative_path: str) -> Path:
        """Return the absolute path of a repository-relative file."""
        return Path(self.path).joinpath(*relative_path.split("/"))

    def has_file(self, relative_path: str) -> bool:
        return self.resolve(relative_path).is_file()
