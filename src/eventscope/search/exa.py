"""Exa search using the official exa-py SDK."""

import logging
import os
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx
from exa_py import AsyncExa

from eventscope.data import SearchResult, Usage
from eventscope.errors import ConfigurationError
from eventscope.url import extract_domain

SNIPPET_CHARS = 500

logger = logging.getLogger(__name__)


class ExaSearcher:
    """Search for content using the Exa API.

    Exa returns web pages with title, URL, published date and page text; the
    leading part of the text serves as the snippet. Exa has no image search,
    so ``search_images`` always returns an empty list. A failed SDK request is
    logged and yields no results.

    Args:
        api_key: Exa API key (defaults to EXA_API_KEY env var).
        num_results: Results requested per search.
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        num_results: int = 20,
    ) -> None:
        self._api_key = api_key or os.environ.get("EXA_API_KEY")
        self._num_results = num_results
        self._client = AsyncExa(api_key=self._api_key) if self._api_key else None

    async def search_web(self, query: str) -> tuple[list[SearchResult], Usage]:
        """Search the web for a query.

        Args:
            query: Free-text search query.

        Returns:
            Tuple of (results in relevance order, usage).
        """
        results = await self._search(query, start_published_date=None)
        return (results, Usage(search_requests=1))

    async def search_images(self, query: str) -> tuple[list[str], Usage]:
        return ([], Usage())

    async def search_recent(self, query: str, *, days: int) -> tuple[list[SearchResult], Usage]:
        """Search for pages published within the last ``days`` days."""
        since = datetime.now(tz=UTC) - timedelta(days=max(days, 1))
        results = await self._search(
            query, start_published_date=since.strftime("%Y-%m-%dT%H:%M:%S.000Z")
        )
        return ([r for r in results if r.title and r.snippet], Usage(search_requests=1))

    async def _search(self, query: str, *, start_published_date: str | None) -> list[SearchResult]:
        if self._client is None:
            raise ConfigurationError(
                "Exa API key required. Pass api_key or set EXA_API_KEY env var."
            )

        kwargs: dict[str, Any] = {
            "num_results": self._num_results,
            "text": {"max_characters": SNIPPET_CHARS},
        }
        if start_published_date:
            kwargs["start_published_date"] = start_published_date

        try:
            response = await self._client.search_and_contents(query, **kwargs)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Exa search failed for %r: %s", query, e)
            return []

        results: list[SearchResult] = []
        for item in response.results:
            if not item.url:
                continue
            snippet = getattr(item, "text", None) or getattr(item, "summary", None) or ""
            results.append(
                SearchResult(
                    title=(item.title or "").strip(),
                    url=item.url,
                    snippet=" ".join(snippet.split())[:SNIPPET_CHARS],
                    display_domain=extract_domain(item.url),
                    published_at=item.published_date,
                )
            )
        logger.info("Exa returned %d results for %r", len(results), query)
        return results
