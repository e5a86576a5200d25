"""Models for the artifacts a run hands back to the CI step."""

from pydantic import BaseModel, ConfigDict


class RunOutputs(BaseModel):
    """Named step outputs, written once after the report is finalized."""

    model_config = ConfigDict(frozen=True)

    has_flow_changes: bool
    comment_file: str
    html_file: str = ""  # Empty unless the run produced a side-by-side report

    def as_pairs(self) -> list[tuple[str, str]]:
        """Return outputs as ordered (key, value) pairs."""
        return [
            ("has_flow_changes", "true" if self.has_flow_changes else "false"),
            ("comment_file", self.comment_file),
            ("html_file", self.html_file),
        ]
