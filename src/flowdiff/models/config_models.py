"""Configuration models for a flowdiff run."""

from pydantic import BaseModel, ConfigDict, Field

from flowdiff.models.flow_models import DiffFormat

DEFAULT_SIDE_BY_SIDE_WIDTH = 200
DEFAULT_TAB_SIZE = 3
DEFAULT_MAX_DIFF_CHARS = 12000
DEFAULT_MAX_ERROR_CHARS = 4000
DEFAULT_MAX_COMMENT_CHARS = 60000
DEFAULT_TIMEOUT = 600


class ReportSettings(BaseModel):
    """Display widths, size caps and the per-invocation deadline."""

    model_config = ConfigDict(frozen=True)

    side_by_side_width: int = Field(default=DEFAULT_SIDE_BY_SIDE_WIDTH, ge=4)
    tab_size: int = Field(default=DEFAULT_TAB_SIZE, ge=1)
    max_diff_chars: int = Field(default=DEFAULT_MAX_DIFF_CHARS, gt=0)
    max_error_chars: int = Field(default=DEFAULT_MAX_ERROR_CHARS, gt=0)
    max_comment_chars: int = Field(default=DEFAULT_MAX_COMMENT_CHARS, gt=0)
    timeout_seconds: float | None = Field(default=DEFAULT_TIMEOUT, gt=0)  # None disables the deadline


class RunConfig(BaseModel):
    """Fully resolved arguments for one run."""

    model_config = ConfigDict(frozen=True)

    base_sha: str = Field(min_length=1)
    head_sha: str = Field(min_length=1)
    workspace: str
    output_file: str
    comment_file: str
    html_file: str
    converter_bin: str = ""  # Empty means "flow2apex" on PATH
    diff_format: DiffFormat = DiffFormat.UNIFIED
    settings: ReportSettings = Field(default_factory=ReportSettings)
