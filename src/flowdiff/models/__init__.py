"""Data models for flowdiff."""

from flowdiff.models.config_models import ReportSettings, RunConfig
from flowdiff.models.flow_models import (
    DiffFormat,
    DiffOutcome,
    DiffStatus,
    RenderOutcome,
    RenderStatus,
    RevisionSnapshot,
)
from flowdiff.models.report_models import RunOutputs

__all__ = [
    "DiffFormat",
    "DiffOutcome",
    "DiffStatus",
    "RenderOutcome",
    "RenderStatus",
    "ReportSettings",
    "RevisionSnapshot",
    "RunConfig",
    "RunOutputs",
]
