"""Structured outcomes of pipeline runs."""

from dataclasses import dataclass, field
from pathlib import Path
from enum import StrEnum
from typing import Any

from eventscope.data import EventDetails, EventRecord, EventUpdate, UpdateDetection, Usage
from eventscope.errors import FailureKind, PipelineError


class RunStage(StrEnum):
    """States of a pipeline run; ``FAILED`` is reachable from any of them."""

    LOAD_EVENT = "load_event"
    SEARCH = "search"
    FETCH = "fetch"
    SYNTHESIZE = "synthesize"
    DETECT = "detect"
    PERSIST = "persist"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class RunFailure:
    """Why a run stopped, in a form callers can branch on."""

    kind: FailureKind
    message: str

    @classmethod
    def from_exception(cls, exc: Exception) -> "RunFailure":
        kind = exc.kind if isinstance(exc, PipelineError) else FailureKind.INTERNAL_ERROR
        return cls(kind=kind, message=str(exc) or type(exc).__name__)


@dataclass(frozen=True)
class RunStats:
    """Counts describing a successful details run."""

    search_results: int = 0
    filtered_results: int = 0
    articles_fetched: int = 0
    articles_scraped: int = 0
    images_found: int = 0
    sources_analyzed: tuple[str, ...] = ()
    total_content_chars: int = 0
    accused_count: int = 0
    victims_count: int = 0
    timeline_count: int = 0


@dataclass
class DetailsRunResult:
    """Outcome of one details run.

    ``failed_at`` names the stage that was executing when the run failed.
    """

    event_id: str
    stage: RunStage
    event: EventRecord | None = None
    details: EventDetails | None = None
    stats: RunStats | None = None
    failure: RunFailure | None = None
    failed_at: RunStage | None = None
    usage: Usage = field(default_factory=Usage)
    log_path: Path | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    def to_summary(self) -> dict[str, Any]:
        """Counts summary returned to external callers on success."""
        summary: dict[str, Any] = {"success": self.ok, "event_id": self.event_id}
        if self.event is not None:
            summary["event_title"] = self.event.title
            summary["query_used"] = self.event.query
        if self.details is not None and self.stats is not None:
            summary.update(
                {
                    "articles_scraped": self.stats.articles_scraped,
                    "images_found": self.stats.images_found,
                    "sources_analyzed": ", ".join(self.stats.sources_analyzed),
                    "analysis_summary": {
                        "location": self.details.location,
                        "accused_count": self.stats.accused_count,
                        "victims_count": self.stats.victims_count,
                        "timeline_events": self.stats.timeline_count,
                        "total_content_length": self.stats.total_content_chars,
                    },
                }
            )
        if self.failure is not None:
            summary["error"] = {"kind": str(self.failure.kind), "message": self.failure.message}
        summary["estimated_cost"] = round(self.usage.estimated_cost, 6)
        return summary


@dataclass
class UpdateRunResult:
    """Outcome of one incremental update run.

    A successful run with ``update`` None found nothing new and wrote nothing.
    """

    event_id: str
    stage: RunStage
    event: EventRecord | None = None
    detection: UpdateDetection | None = None
    failure: RunFailure | None = None
    failed_at: RunStage | None = None
    usage: Usage = field(default_factory=Usage)
    log_path: Path | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def update(self) -> EventUpdate | None:
        return self.detection.update if self.detection else None

    def to_summary(self) -> dict[str, Any]:
        summary: dict[str, Any] = {"success": self.ok, "event_id": self.event_id}
        if self.event is not None:
            summary["event_title"] = self.event.title
        if self.detection is not None:
            summary["results_found"] = self.detection.total_results
            summary["new_results"] = self.detection.new_results
            summary["search_window_days"] = self.detection.window_days
            summary["update_created"] = self.detection.update is not None
            if self.detection.update is not None:
                summary["update"] = {
                    "title": self.detection.update.title,
                    "description": self.detection.update.description,
                    "update_date": self.detection.update.update_date.isoformat(),
                }
            if self.detection.analysis is not None:
                summary["relevance_score"] = self.detection.analysis.relevance_score
                summary["key_insights"] = list(self.detection.analysis.key_insights)
        if self.failure is not None:
            summary["error"] = {"kind": str(self.failure.kind), "message": self.failure.message}
        summary["estimated_cost"] = round(self.usage.estimated_cost, 6)
        return summary
