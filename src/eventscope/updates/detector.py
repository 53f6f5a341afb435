"""Detection and summarization of new developments since the watermark."""

import logging
import math
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime

import anthropic

from eventscope.data import EventUpdate, SearchResult, UpdateAnalysis, UpdateDetection, Usage
from eventscope.errors import SynthesisError, SynthesisFormatError
from eventscope.llm import DEFAULT_MODEL, response_text, usage_from_response
from eventscope.search.base import WebSearcher
from eventscope.synthesis.parsing import extract_embedded_json

MAX_TITLE_CHARS = 100
MAX_DESCRIPTION_CHARS = 1000

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

SYSTEM_PROMPT = """\
You are an expert content analyzer. Analyze the provided search results and \
create a structured update.

Return your response in the following JSON format:
{
  "title": "Clear, concise title for the update (max 100 characters)",
  "description": "Detailed description of the key findings and insights (max 1000 characters)",
  "relevance_score": "Number between 0-10 indicating how relevant this information is",
  "key_insights": ["Array of 3-5 key insights or bullet points"],
  "summary": "Brief executive summary (max 200 characters)"
}

Focus on:
- Recent developments and changes
- Important trends or patterns
- Actionable insights
- Credible sources and data points

Return ONLY the JSON object.\
"""

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def window_days(last_updated_at: datetime | None, now: datetime) -> int:
    """Days to search back: whole days since the watermark, at least 1."""
    since = _as_utc(last_updated_at) if last_updated_at else EPOCH
    elapsed_days = (now - since).total_seconds() / 86400
    return max(math.ceil(elapsed_days), 1)


def parse_published_date(value: str | None, now: datetime) -> datetime | None:
    """Parse a provider-supplied publication date.

    Accepts ISO 8601 (including a trailing ``Z``) and RFC 2822 forms. Naive
    values are taken as UTC.

    Returns:
        The timestamp in UTC, or None if unparseable or in the future.
    """
    if not value or not value.strip():
        return None
    text = value.strip()

    parsed: datetime | None = None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        try:
            parsed = parsedate_to_datetime(text)
        except (TypeError, ValueError, IndexError):
            parsed = None

    if parsed is None:
        return None
    parsed = _as_utc(parsed)
    if parsed > now:
        return None
    return parsed


def _format_results(results: list[SearchResult]) -> str:
    return "\n\n".join(
        f"Result {i}:\n"
        f"Title: {r.title}\n"
        f"Content: {r.snippet}\n"
        f"Source: {r.url}\n"
        f"Published: {r.published_at or 'Date not available'}\n"
        "---"
        for i, r in enumerate(results, 1)
    )


def _parse_analysis(raw: dict[str, object]) -> UpdateAnalysis:
    title = str(raw.get("title") or "").strip()
    description = str(raw.get("description") or "").strip()
    if not title or not description:
        raise SynthesisFormatError("Update analysis is missing title or description")

    relevance = 0.0
    raw_relevance = raw.get("relevance_score")
    if isinstance(raw_relevance, (int, float)):
        relevance = float(raw_relevance)
    elif isinstance(raw_relevance, str):
        try:
            relevance = float(raw_relevance)
        except ValueError:
            relevance = 0.0

    raw_insights = raw.get("key_insights")
    insights: tuple[str, ...] = ()
    if isinstance(raw_insights, list):
        insights = tuple(str(i).strip() for i in raw_insights if str(i).strip())

    return UpdateAnalysis(
        title=title,
        description=description,
        relevance_score=max(0.0, min(10.0, relevance)),
        key_insights=insights,
        summary=str(raw.get("summary") or "").strip(),
    )


class UpdateDetector:
    """Find results newer than an event's watermark and summarize them.

    When nothing qualifies, no model call is made.

    Args:
        searcher: Provider used for the recency-restricted search.
        client: Shared Anthropic client.
        model: Anthropic model to use.
        temperature: Sampling temperature.
        max_tokens: Output token budget.
    """

    def __init__(
        self,
        searcher: WebSearcher,
        client: anthropic.AsyncAnthropic,
        *,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.3,
        max_tokens: int = 1000,
    ) -> None:
        self._searcher = searcher
        self._client = client
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens

    async def detect_and_summarize(
        self,
        event_id: str,
        query: str,
        last_updated_at: datetime | None,
        *,
        now: datetime | None = None,
    ) -> tuple[UpdateDetection, Usage]:
        """Check for new material and summarize it.

        Args:
            event_id: Event the update belongs to.
            query: The event query.
            last_updated_at: Current watermark; None means never updated.
            now: Current time (defaults to the wall clock).

        Returns:
            Tuple of (detection, usage). ``detection.update`` is None when no
            result is newer than the watermark.
        """
        now = _as_utc(now) if now else datetime.now(tz=UTC)
        watermark = _as_utc(last_updated_at) if last_updated_at else EPOCH
        days = window_days(last_updated_at, now)

        results, usage = await self._searcher.search_recent(query, days=days)
        fresh = [
            r
            for r in results
            if (published := parse_published_date(r.published_at, now)) is not None
            and published > watermark
        ]
        logger.info(
            "Found %d of %d results newer than %s", len(fresh), len(results), watermark.isoformat()
        )

        if not fresh:
            return (
                UpdateDetection(
                    update=None,
                    total_results=len(results),
                    new_results=0,
                    window_days=days,
                ),
                usage,
            )

        analysis, llm_usage = await self._summarize(fresh, query)
        usage += llm_usage

        update = EventUpdate(
            event_id=event_id,
            title=analysis.title[:MAX_TITLE_CHARS],
            description=analysis.description[:MAX_DESCRIPTION_CHARS],
            update_date=now,
        )
        return (
            UpdateDetection(
                update=update,
                analysis=analysis,
                total_results=len(results),
                new_results=len(fresh),
                window_days=days,
            ),
            usage,
        )

    async def _summarize(
        self, results: list[SearchResult], query: str
    ) -> tuple[UpdateAnalysis, Usage]:
        user_prompt = (
            f'Original Query: "{query}"\n\n'
            f"Recent Search Results to Analyze:\n{_format_results(results)}\n\n"
            "Please analyze these recent search results and provide insights about "
            "new developments related to the original query."
        )

        try:
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=self._max_tokens,
                temperature=self._temperature,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": user_prompt}],
            )
        except anthropic.APIError as e:
            raise SynthesisError(f"Update analysis request failed: {e}") from e

        usage = usage_from_response(self._model, response)
        analysis = _parse_analysis(extract_embedded_json(response_text(response)))
        return (analysis, usage)
