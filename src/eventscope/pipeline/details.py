"""Search, fetch, synthesize and persist structured event details."""

import asyncio
import logging
import time
from datetime import UTC, datetime
from pathlib import Path

from eventscope.data import EventDetails, EventRecord, ExtractedArticle, SearchResult, Usage
from eventscope.errors import NoContentExtracted, PipelineError
from eventscope.fetch import ArticleFetcher, select_qualifying
from eventscope.pipeline.base import load_event
from eventscope.pipeline.results import DetailsRunResult, RunFailure, RunStage, RunStats
from eventscope.pricing import estimate_usage_cost
from eventscope.run_logger import RunLog, RunLogger
from eventscope.search import DEFAULT_DENYLIST, WebSearcher, filter_results, select_for_fetch
from eventscope.store import EventStore
from eventscope.synthesis import Synthesizer
from eventscope.url import extract_domain

logger = logging.getLogger(__name__)


class DetailsPipeline:
    """Build the structured details record for one event.

    Flow:
    1. Load the event and its query from the store
    2. Web search, then dedup/denylist filtering
    3. Fetch the top results concurrently while image search runs alongside
    4. Synthesize details from the articles that cleared the content threshold
    5. Upsert the details, then advance the event watermark

    ``sources`` on the persisted record are the URLs of the qualifying
    articles, never anything taken from model output.

    Args:
        store: Event store.
        searcher: Web and image search provider.
        fetcher: Article fetcher.
        synthesizer: Structured details synthesizer.
        max_fetch: Number of filtered results fetched in full.
        min_content_chars: Article body length an article must exceed.
        denylist: Domains excluded from search results.
        run_logger: Optional RunLogger for intermediate result logging.
    """

    def __init__(
        self,
        store: EventStore,
        searcher: WebSearcher,
        fetcher: ArticleFetcher,
        synthesizer: Synthesizer,
        *,
        max_fetch: int = 12,
        min_content_chars: int = 50,
        denylist: tuple[str, ...] = DEFAULT_DENYLIST,
        run_logger: RunLogger | None = None,
    ) -> None:
        self._store = store
        self._searcher = searcher
        self._fetcher = fetcher
        self._synthesizer = synthesizer
        self._max_fetch = max_fetch
        self._min_content_chars = min_content_chars
        self._denylist = denylist
        self._run_logger = run_logger or RunLogger(Path("logs"), enabled=False)

    async def run(self, event_id: str) -> DetailsRunResult:
        """Execute the details pipeline for one event.

        Args:
            event_id: Identifier of the event to process.

        Returns:
            The run result; failures are reported on it, never raised.
        """
        run_log = self._run_logger.start_run("details", event_id)
        result = DetailsRunResult(event_id=event_id, stage=RunStage.LOAD_EVENT)

        try:
            await self._execute(result, run_log)
        except PipelineError as e:
            logger.error("Details run for event %s failed at %s: %s", event_id, result.stage, e)
            self._fail(result, e)
        except Exception as e:
            logger.exception("Unexpected error in details run for event %s", event_id)
            self._fail(result, e)

        result.usage.estimated_cost = estimate_usage_cost(result.usage)
        try:
            result.log_path = run_log.finish(result, result.usage)
        except OSError as e:
            logger.warning("Could not write run log for event %s: %s", event_id, e)
        return result

    def _fail(self, result: DetailsRunResult, exc: Exception) -> None:
        result.failed_at = result.stage
        result.stage = RunStage.FAILED
        result.failure = RunFailure.from_exception(exc)

    async def _execute(self, result: DetailsRunResult, run_log: RunLog) -> None:
        event = await load_event(self._store, result.event_id)
        result.event = event

        result.stage = RunStage.SEARCH
        raw_results, filtered = await self._search(event, result.usage, run_log)

        result.stage = RunStage.FETCH
        articles, images = await self._fetch(event, filtered, result.usage, run_log)
        qualifying = select_qualifying(articles, self._min_content_chars)
        if not qualifying:
            raise NoContentExtracted(
                f"None of {len(articles)} fetched articles had more than "
                f"{self._min_content_chars} characters of content"
            )

        result.stage = RunStage.SYNTHESIZE
        details = await self._synthesize(event, qualifying, filtered, images, result.usage, run_log)

        result.stage = RunStage.PERSIST
        await self._persist(event, details, run_log)

        result.details = details
        result.stats = _stats(raw_results, filtered, articles, qualifying, details)
        result.stage = RunStage.DONE
        logger.info(
            "Details saved for event %s: %d sources, %d images",
            event.event_id,
            len(details.sources),
            len(details.images),
        )

    async def _search(
        self, event: EventRecord, usage: Usage, run_log: RunLog
    ) -> tuple[list[SearchResult], list[SearchResult]]:
        t0 = time.monotonic()
        raw_results, search_usage = await self._searcher.search_web(event.query)
        usage += search_usage
        filtered = filter_results(raw_results, self._denylist)

        run_log.log_stage(
            stage="search",
            component=type(self._searcher).__name__,
            input_data={"query": event.query},
            output_data={"raw_results": len(raw_results), "filtered": filtered},
            usage=search_usage,
            duration_seconds=time.monotonic() - t0,
        )
        return (raw_results, filtered)

    async def _fetch(
        self,
        event: EventRecord,
        filtered: list[SearchResult],
        usage: Usage,
        run_log: RunLog,
    ) -> tuple[list[ExtractedArticle | None], list[str]]:
        urls = [r.url for r in select_for_fetch(filtered, self._max_fetch)]

        t0 = time.monotonic()
        (articles, fetch_usage), (images, image_usage) = await asyncio.gather(
            self._fetcher.fetch_all(urls),
            self._search_images(event.query),
        )
        usage += fetch_usage
        usage += image_usage

        run_log.log_stage(
            stage="fetch",
            component=type(self._fetcher).__name__,
            input_data=urls,
            output_data={"articles": articles, "images": images},
            usage=fetch_usage + image_usage,
            duration_seconds=time.monotonic() - t0,
        )
        return (articles, images)

    async def _search_images(self, query: str) -> tuple[list[str], Usage]:
        try:
            return await self._searcher.search_images(query)
        except Exception as e:
            logger.warning("Image search failed for %r: %s", query, e)
            return ([], Usage())

    async def _synthesize(
        self,
        event: EventRecord,
        qualifying: list[ExtractedArticle],
        snippets: list[SearchResult],
        images: list[str],
        usage: Usage,
        run_log: RunLog,
    ) -> EventDetails:
        t0 = time.monotonic()
        synthesized, synth_usage = await self._synthesizer.synthesize(
            qualifying, snippets, event.query
        )
        usage += synth_usage

        details = EventDetails.from_synthesis(
            synthesized,
            sources=[a.url for a in qualifying],
            images=images,
        )
        run_log.log_stage(
            stage="synthesize",
            component=type(self._synthesizer).__name__,
            input_data={"articles": len(qualifying), "snippets": len(snippets)},
            output_data=details,
            usage=synth_usage,
            duration_seconds=time.monotonic() - t0,
        )
        return details

    async def _persist(self, event: EventRecord, details: EventDetails, run_log: RunLog) -> None:
        t0 = time.monotonic()
        now = datetime.now(tz=UTC)
        # The watermark must only move once the details write has landed.
        await self._store.upsert_details(event.event_id, details, timestamp=now)
        await self._store.advance_watermark(event.event_id, now)

        run_log.log_stage(
            stage="persist",
            component=type(self._store).__name__,
            input_data={"event_id": event.event_id},
            output_data={"watermark": now},
            usage=None,
            duration_seconds=time.monotonic() - t0,
        )


def _stats(
    raw_results: list[SearchResult],
    filtered: list[SearchResult],
    articles: list[ExtractedArticle | None],
    qualifying: list[ExtractedArticle],
    details: EventDetails,
) -> RunStats:
    domains = dict.fromkeys(a.source_domain or extract_domain(a.url) for a in qualifying)
    return RunStats(
        search_results=len(raw_results),
        filtered_results=len(filtered),
        articles_fetched=sum(1 for a in articles if a is not None),
        articles_scraped=len(details.sources),
        images_found=len(details.images),
        sources_analyzed=tuple(domains),
        total_content_chars=sum(len(a.body) for a in qualifying),
        accused_count=len(details.accused),
        victims_count=len(details.victims),
        timeline_count=len(details.timeline),
    )
