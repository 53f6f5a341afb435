"""Tests for the details and update pipelines."""

import asyncio
import json
from datetime import UTC, datetime, timedelta
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from eventscope.data import EventRecord, SearchResult, UpdateDetection, Usage
from eventscope.errors import FailureKind, StoreError
from eventscope.fetch import ArticleFetcher
from eventscope.pipeline import DetailsPipeline, RunStage, UpdatePipeline
from eventscope.run_logger import RunLogger
from eventscope.store import InMemoryEventStore
from eventscope.synthesis import ClaudeSynthesizer
from eventscope.updates import UpdateDetector

QUERY = "Example factory fire 2023"
WATERMARK = datetime(2024, 1, 1, tzinfo=UTC)

ARTICLE_HTML = (
    "<html><head><title>Fire at Example plant</title></head><body><article>"
    + "A large fire broke out at the Example factory, injuring several workers. " * 4
    + "</article></body></html>"
)


class FakeSearcher:
    """In-process searcher returning canned results."""

    def __init__(
        self,
        results: list[SearchResult],
        images: list[str] | None = None,
        recent: list[SearchResult] | None = None,
    ) -> None:
        self.results = results
        self.images = images or []
        self.recent = recent or []
        self.image_error: Exception | None = None

    async def search_web(self, query: str) -> tuple[list[SearchResult], Usage]:
        return (list(self.results), Usage(search_requests=2))

    async def search_images(self, query: str) -> tuple[list[str], Usage]:
        if self.image_error is not None:
            raise self.image_error
        return (list(self.images), Usage(image_requests=1))

    async def search_recent(self, query: str, *, days: int) -> tuple[list[SearchResult], Usage]:
        return (list(self.recent), Usage(search_requests=1))


class FailingDetailsStore(InMemoryEventStore):
    """Store whose details write always fails."""

    async def upsert_details(self, event_id, details, *, timestamp) -> None:
        raise StoreError("write rejected")


def _make_mock_client(payload: dict) -> MagicMock:
    block = MagicMock()
    block.text = "```json\n" + json.dumps(payload) + "\n```"
    response = MagicMock()
    response.content = [block]
    response.usage = MagicMock(input_tokens=2000, output_tokens=400)
    client = MagicMock()
    client.messages.create = AsyncMock(return_value=response)
    return client


def _results() -> list[SearchResult]:
    """Three raw results: two unique domains plus one duplicate URL."""
    first = SearchResult(
        title="Fire at plant",
        url="https://news-a.com/fire",
        snippet="Fire snippet",
        display_domain="news-a.com",
    )
    second = SearchResult(
        title="Plant blaze",
        url="https://news-b.com/blaze",
        snippet="Blaze snippet",
        display_domain="news-b.com",
    )
    return [first, second, first]


def _store() -> InMemoryEventStore:
    return InMemoryEventStore(
        [EventRecord(event_id="1", query=QUERY, title="Factory fire", last_updated_at=WATERMARK)]
    )


@pytest.fixture
def serve_articles(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    """Answer every article fetch with a content-bearing page and record the URLs."""
    fetched: list[str] = []

    async def mock_get(self, url, **kwargs):
        fetched.append(url)
        return httpx.Response(200, html=ARTICLE_HTML)

    monkeypatch.setattr(httpx.AsyncClient, "get", mock_get)
    return fetched


class TestDetailsPipeline:
    """Tests for DetailsPipeline."""

    def _pipeline(self, store, searcher, client, **kwargs) -> DetailsPipeline:
        return DetailsPipeline(
            store,
            searcher,
            ArticleFetcher(timeout_seconds=0.2),
            ClaudeSynthesizer(client),
            **kwargs,
        )

    async def test_end_to_end_sources_match_fetched_urls(self, serve_articles: list[str]) -> None:
        store = _store()
        searcher = FakeSearcher(_results(), images=["https://img.com/fire.jpg"])
        client = _make_mock_client(
            {
                "location": "Springfield",
                "details": "Fire at the Example factory.",
                "accused": [],
                "victims": ["Workers"],
                "timeline": ["2023-05-01: fire"],
                "sources": ["https://hallucinated.com/made-up"],
            }
        )

        result = await self._pipeline(store, searcher, client).run("1")

        assert result.ok, result.failure
        assert result.stage == RunStage.DONE
        assert sorted(serve_articles) == ["https://news-a.com/fire", "https://news-b.com/blaze"]
        assert result.details is not None
        assert result.details.sources == ("https://news-a.com/fire", "https://news-b.com/blaze")
        assert result.details.images == ("https://img.com/fire.jpg",)
        assert result.stats is not None
        assert result.stats.search_results == 3
        assert result.stats.filtered_results == 2
        assert result.stats.articles_scraped == 2
        assert result.stats.sources_analyzed == ("news-a.com", "news-b.com")
        assert result.stats.victims_count == 1

        stored = await store.get_details("1")
        assert stored is not None
        assert stored.details == result.details
        event = await store.get_event("1")
        assert event is not None
        assert event.last_updated_at > WATERMARK
        assert event.last_updated_at == stored.updated_at

        assert result.usage.search_requests == 2
        assert result.usage.image_requests == 1
        assert result.usage.page_fetches == 2
        assert result.usage.input_tokens == 2000
        assert result.usage.estimated_cost > 0

    async def test_all_fetches_timing_out_is_no_content(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        async def mock_get(self, url, **kwargs):
            await asyncio.sleep(5)
            return httpx.Response(200, html=ARTICLE_HTML)

        monkeypatch.setattr(httpx.AsyncClient, "get", mock_get)
        store = _store()
        client = _make_mock_client({"location": "X"})

        result = await self._pipeline(store, FakeSearcher(_results()), client).run("1")

        assert not result.ok
        assert result.stage == RunStage.FAILED
        assert result.failed_at == RunStage.FETCH
        assert result.failure.kind == FailureKind.NO_CONTENT
        client.messages.create.assert_not_called()
        assert await store.get_details("1") is None
        event = await store.get_event("1")
        assert event.last_updated_at == WATERMARK

    async def test_store_write_failure_leaves_watermark(self, serve_articles: list[str]) -> None:
        store = FailingDetailsStore(
            [EventRecord(event_id="1", query=QUERY, last_updated_at=WATERMARK)]
        )
        client = _make_mock_client({"location": "X"})

        result = await self._pipeline(store, FakeSearcher(_results()), client).run("1")

        assert result.failure is not None
        assert result.failure.kind == FailureKind.STORE_ERROR
        assert result.failed_at == RunStage.PERSIST
        event = await store.get_event("1")
        assert event.last_updated_at == WATERMARK

    async def test_synthesis_format_error_persists_nothing(self, serve_articles: list[str]) -> None:
        store = _store()
        client = _make_mock_client({})
        client.messages.create.return_value.content[0].text = "no json here"

        result = await self._pipeline(store, FakeSearcher(_results()), client).run("1")

        assert result.failure.kind == FailureKind.SYNTHESIS_FORMAT_ERROR
        assert result.failed_at == RunStage.SYNTHESIZE
        assert await store.get_details("1") is None
        assert (await store.get_event("1")).last_updated_at == WATERMARK

    async def test_missing_event_is_not_found(self) -> None:
        client = _make_mock_client({})
        result = await self._pipeline(_store(), FakeSearcher([]), client).run("404")
        assert result.failure.kind == FailureKind.NOT_FOUND
        assert result.failed_at == RunStage.LOAD_EVENT

    async def test_event_without_query_is_not_found(self) -> None:
        store = InMemoryEventStore([EventRecord(event_id="1", query="  ")])
        result = await self._pipeline(store, FakeSearcher([]), _make_mock_client({})).run("1")
        assert result.failure.kind == FailureKind.NOT_FOUND

    async def test_empty_event_id_is_bad_request(self) -> None:
        result = await self._pipeline(_store(), FakeSearcher([]), _make_mock_client({})).run("")
        assert result.failure.kind == FailureKind.BAD_REQUEST

    async def test_image_search_failure_degrades_to_no_images(
        self, serve_articles: list[str]
    ) -> None:
        searcher = FakeSearcher(_results())
        searcher.image_error = RuntimeError("image provider down")

        pipeline = self._pipeline(_store(), searcher, _make_mock_client({"location": "X"}))
        result = await pipeline.run("1")

        assert result.ok
        assert result.details.images == ()

    async def test_denylisted_results_are_not_fetched(self, serve_articles: list[str]) -> None:
        results = _results() + [
            SearchResult(title="Thread", url="https://www.reddit.com/r/news/1", snippet="s")
        ]
        result = await self._pipeline(
            _store(), FakeSearcher(results), _make_mock_client({"location": "X"})
        ).run("1")

        assert result.ok
        assert "https://www.reddit.com/r/news/1" not in serve_articles

    async def test_max_fetch_limits_fetch_fan_out(self, serve_articles: list[str]) -> None:
        result = await self._pipeline(
            _store(), FakeSearcher(_results()), _make_mock_client({"location": "X"}), max_fetch=1
        ).run("1")

        assert serve_articles == ["https://news-a.com/fire"]
        assert result.details.sources == ("https://news-a.com/fire",)

    async def test_unexpected_error_is_internal(self) -> None:
        searcher = FakeSearcher([])
        searcher.search_web = AsyncMock(side_effect=RuntimeError("boom"))

        result = await self._pipeline(_store(), searcher, _make_mock_client({})).run("1")

        assert result.failure.kind == FailureKind.INTERNAL_ERROR
        assert result.failed_at == RunStage.SEARCH

    async def test_run_log_written(self, serve_articles: list[str], tmp_path: Path) -> None:
        run_logger = RunLogger(tmp_path)
        pipeline = self._pipeline(
            _store(),
            FakeSearcher(_results()),
            _make_mock_client({"location": "X"}),
            run_logger=run_logger,
        )

        result = await pipeline.run("1")

        assert result.log_path is not None
        assert result.log_path.parent == tmp_path
        data = json.loads(result.log_path.read_text())
        assert data["pipeline_type"] == "details"
        assert [s["stage"] for s in data["stages"]] == ["search", "fetch", "synthesize", "persist"]
        assert data["outcome"]["stage"] == "done"


class TestUpdatePipeline:
    """Tests for UpdatePipeline."""

    async def test_no_new_content_writes_nothing(self) -> None:
        store = _store()
        old = SearchResult(
            title="t", url="https://a.com", snippet="s", published_at="2023-12-01T00:00:00Z"
        )
        client = _make_mock_client({})
        detector = UpdateDetector(FakeSearcher([], recent=[old]), client)

        result = await UpdatePipeline(store, detector).run("1")

        assert result.ok
        assert result.update is None
        assert result.stage == RunStage.DONE
        client.messages.create.assert_not_called()
        assert await store.list_updates("1") == []
        assert (await store.get_event("1")).last_updated_at == WATERMARK

    async def test_new_content_appends_update_and_advances_watermark(self) -> None:
        store = _store()
        fresh_date = datetime.now(tz=UTC) - timedelta(hours=1)
        fresh = SearchResult(
            title="New", url="https://a.com/new", snippet="s", published_at=fresh_date.isoformat()
        )
        client = _make_mock_client(
            {"title": "Fines issued", "description": "Regulators fined the company."}
        )
        detector = UpdateDetector(FakeSearcher([], recent=[fresh]), client)

        result = await UpdatePipeline(store, detector).run("1")

        assert result.ok, result.failure
        assert result.update is not None
        updates = await store.list_updates("1")
        assert [u.title for u in updates] == ["Fines issued"]
        event = await store.get_event("1")
        assert event.last_updated_at == result.update.update_date

    async def test_detector_failure_is_reported(self) -> None:
        store = _store()
        detector = MagicMock()
        detector.detect_and_summarize = AsyncMock(side_effect=StoreError("unreachable"))

        result = await UpdatePipeline(store, detector).run("1")

        assert result.failure.kind == FailureKind.STORE_ERROR
        assert result.failed_at == RunStage.DETECT

    async def test_missing_event(self) -> None:
        detector = MagicMock()
        detector.detect_and_summarize = AsyncMock(
            return_value=(UpdateDetection(update=None), Usage())
        )
        result = await UpdatePipeline(_store(), detector).run("nope")
        assert result.failure.kind == FailureKind.NOT_FOUND
        detector.detect_and_summarize.assert_not_called()

    async def test_run_log_path_is_reported_per_run(self, tmp_path: Path) -> None:
        detector = MagicMock()
        detector.detect_and_summarize = AsyncMock(
            return_value=(UpdateDetection(update=None), Usage())
        )
        pipeline = UpdatePipeline(_store(), detector, run_logger=RunLogger(tmp_path))

        first, second = await asyncio.gather(pipeline.run("1"), pipeline.run("1"))

        assert first.log_path is not None
        assert second.log_path is not None
        assert first.log_path != second.log_path

    async def test_disabled_logging_reports_no_path(self) -> None:
        detector = MagicMock()
        detector.detect_and_summarize = AsyncMock(
            return_value=(UpdateDetection(update=None), Usage())
        )
        result = await UpdatePipeline(_store(), detector).run("1")
        assert result.log_path is None
