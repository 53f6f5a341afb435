"""Pipelines producing event details and incremental updates."""

from eventscope.pipeline.base import DetailsRunner, UpdateRunner, load_event
from eventscope.pipeline.details import DetailsPipeline
from eventscope.pipeline.results import (
    DetailsRunResult,
    RunFailure,
    RunStage,
    RunStats,
    UpdateRunResult,
)
from eventscope.pipeline.updates import UpdatePipeline

__all__ = [
    "DetailsPipeline",
    "DetailsRunResult",
    "DetailsRunner",
    "RunFailure",
    "RunStage",
    "RunStats",
    "UpdatePipeline",
    "UpdateRunResult",
    "UpdateRunner",
    "load_event",
]
