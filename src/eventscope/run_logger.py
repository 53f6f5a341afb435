"""Run logger for recording intermediate pipeline results to JSON files."""

import dataclasses
import uuid
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from eventscope.data import Usage


class StageRecord(BaseModel):
    """Record of a single pipeline stage execution."""

    stage: str
    component: str
    input: Any = None
    output: Any = None
    usage: dict[str, Any] | None = None
    timestamp: str = ""
    duration_seconds: float = 0.0


class RunRecord(BaseModel):
    """Record of a complete pipeline run."""

    run_id: str
    pipeline_type: str
    event_id: str
    started_at: str
    completed_at: str | None = None
    stages: list[StageRecord] = []
    outcome: dict[str, Any] | None = None
    total_usage: dict[str, Any] | None = None


def _serialize(obj: Any) -> Any:
    """Serialize an object to JSON-compatible format.

    Handles dataclasses, Pydantic models, enums, datetimes, tuples, lists,
    dicts, and primitives. Usage objects include computed token totals.
    """
    if obj is None:
        return None
    if isinstance(obj, Usage):
        return {
            "api_calls": [_serialize(c) for c in obj.api_calls],
            "search_requests": obj.search_requests,
            "image_requests": obj.image_requests,
            "page_fetches": obj.page_fetches,
            "input_tokens": obj.input_tokens,
            "output_tokens": obj.output_tokens,
            "estimated_cost": obj.estimated_cost,
        }
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: _serialize(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, (list, tuple)):
        return [_serialize(item) for item in obj]
    if isinstance(obj, dict):
        return {k: _serialize(v) for k, v in obj.items()}
    if isinstance(obj, Path):
        return str(obj)
    return obj


class RunLog:
    """Stage records of one pipeline run.

    Obtained from ``RunLogger.start_run``; a disabled log ignores every call.
    """

    def __init__(self, record: RunRecord | None, log_dir: Path) -> None:
        self._record = record
        self._log_dir = log_dir

    @property
    def enabled(self) -> bool:
        return self._record is not None

    def log_stage(
        self,
        stage: str,
        component: str,
        input_data: Any,
        output_data: Any,
        usage: Usage | None,
        duration_seconds: float,
    ) -> None:
        """Append a stage record to the run.

        Args:
            stage: Stage name (e.g. "search", "fetch").
            component: Component class name.
            input_data: Stage input (will be serialized).
            output_data: Stage output (will be serialized).
            usage: Usage for this stage (None for stages without external calls).
            duration_seconds: Wall-clock time for this stage.
        """
        if self._record is None:
            return

        self._record.stages.append(
            StageRecord(
                stage=stage,
                component=component,
                input=_serialize(input_data),
                output=_serialize(output_data),
                usage=_serialize(usage) if usage is not None else None,
                timestamp=datetime.now(tz=UTC).isoformat(),
                duration_seconds=round(duration_seconds, 4),
            )
        )

    def finish(self, outcome: Any, usage: Usage | None) -> Path | None:
        """Write the run record to a JSON file.

        Args:
            outcome: Final run result (will be serialized).
            usage: Total accumulated usage.

        Returns:
            Path to the written JSON file, or None if logging is disabled.
        """
        if self._record is None:
            return None

        self._record.completed_at = datetime.now(tz=UTC).isoformat()
        self._record.outcome = _serialize(outcome)
        self._record.total_usage = _serialize(usage) if usage is not None else None

        self._log_dir.mkdir(parents=True, exist_ok=True)

        # run_<pipeline>_2026-02-12T14-30-00_<id>.json (colons -> dashes)
        ts = self._record.started_at.replace(":", "-").split(".")[0].split("+")[0]
        filename = f"run_{self._record.pipeline_type}_{ts}_{self._record.run_id[:8]}.json"
        filepath = self._log_dir / filename

        filepath.write_text(self._record.model_dump_json(indent=2))
        self._record = None
        return filepath


class RunLogger:
    """Creates per-run logs that are written as one JSON file each.

    When ``enabled=False``, every run log it hands out is a no-op.

    Args:
        log_dir: Directory to write JSON log files.
        enabled: If False, all logging is skipped.
    """

    def __init__(self, log_dir: Path, *, enabled: bool = True) -> None:
        self._log_dir = log_dir
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        """Whether logging is active."""
        return self._enabled

    def start_run(self, pipeline_type: str, event_id: str) -> RunLog:
        """Begin recording a run.

        Args:
            pipeline_type: Type of pipeline ("details" or "updates").
            event_id: The event being processed.
        """
        if not self._enabled:
            return RunLog(None, self._log_dir)

        record = RunRecord(
            run_id=str(uuid.uuid4()),
            pipeline_type=pipeline_type,
            event_id=event_id,
            started_at=datetime.now(tz=UTC).isoformat(),
        )
        return RunLog(record, self._log_dir)
