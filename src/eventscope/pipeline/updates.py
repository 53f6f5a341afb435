"""Detect, summarize and persist incremental event updates."""

import logging
import time
from pathlib import Path

from eventscope.errors import PipelineError
from eventscope.pipeline.base import load_event
from eventscope.pipeline.results import RunFailure, RunStage, UpdateRunResult
from eventscope.pricing import estimate_usage_cost
from eventscope.run_logger import RunLog, RunLogger
from eventscope.store import EventStore
from eventscope.updates import UpdateDetector

logger = logging.getLogger(__name__)


class UpdatePipeline:
    """Append a short update when an event has news newer than its watermark.

    Nothing is written when the detector finds no new material. Otherwise the
    update is appended first and the watermark advanced to its date after.

    Args:
        store: Event store.
        detector: Incremental update detector.
        run_logger: Optional RunLogger for intermediate result logging.
    """

    def __init__(
        self,
        store: EventStore,
        detector: UpdateDetector,
        *,
        run_logger: RunLogger | None = None,
    ) -> None:
        self._store = store
        self._detector = detector
        self._run_logger = run_logger or RunLogger(Path("logs"), enabled=False)

    async def run(self, event_id: str) -> UpdateRunResult:
        """Execute the update pipeline for one event.

        Args:
            event_id: Identifier of the event to process.

        Returns:
            The run result; failures are reported on it, never raised.
        """
        run_log = self._run_logger.start_run("updates", event_id)
        result = UpdateRunResult(event_id=event_id, stage=RunStage.LOAD_EVENT)

        try:
            await self._execute(result, run_log)
        except PipelineError as e:
            logger.error("Update run for event %s failed at %s: %s", event_id, result.stage, e)
            self._fail(result, e)
        except Exception as e:
            logger.exception("Unexpected error in update run for event %s", event_id)
            self._fail(result, e)

        result.usage.estimated_cost = estimate_usage_cost(result.usage)
        try:
            result.log_path = run_log.finish(result, result.usage)
        except OSError as e:
            logger.warning("Could not write run log for event %s: %s", event_id, e)
        return result

    def _fail(self, result: UpdateRunResult, exc: Exception) -> None:
        result.failed_at = result.stage
        result.stage = RunStage.FAILED
        result.failure = RunFailure.from_exception(exc)

    async def _execute(self, result: UpdateRunResult, run_log: RunLog) -> None:
        event = await load_event(self._store, result.event_id)
        result.event = event

        result.stage = RunStage.DETECT
        t0 = time.monotonic()
        detection, usage = await self._detector.detect_and_summarize(
            event.event_id, event.query, event.last_updated_at
        )
        result.usage += usage
        result.detection = detection
        run_log.log_stage(
            stage="detect",
            component=type(self._detector).__name__,
            input_data={"query": event.query, "last_updated_at": event.last_updated_at},
            output_data=detection,
            usage=usage,
            duration_seconds=time.monotonic() - t0,
        )

        if detection.update is None:
            logger.info("No new content for event %s", event.event_id)
            result.stage = RunStage.DONE
            return

        result.stage = RunStage.PERSIST
        t0 = time.monotonic()
        await self._store.append_update(detection.update)
        await self._store.advance_watermark(event.event_id, detection.update.update_date)
        run_log.log_stage(
            stage="persist",
            component=type(self._store).__name__,
            input_data=detection.update,
            output_data={"watermark": detection.update.update_date},
            usage=None,
            duration_seconds=time.monotonic() - t0,
        )

        result.stage = RunStage.DONE
        logger.info("Update saved for event %s: %s", event.event_id, detection.update.title)
