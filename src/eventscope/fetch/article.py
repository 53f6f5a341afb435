"""Bounded-time article retrieval with per-URL failure isolation."""

import asyncio
import logging

import httpx

from eventscope.data import ExtractedArticle, Usage
from eventscope.extract import DEFAULT_MAX_CHARS, extract_article

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)


class ArticleFetcher:
    """Fetch article pages and hand their HTML to the content extractor.

    A failed URL (timeout, non-2xx status, network error, non-HTML payload)
    yields ``None`` and a warning; it never aborts the batch.

    Args:
        timeout_seconds: Wall-clock bound for a single fetch.
        max_chars: Body length cap passed to the extractor.
        user_agent: User-Agent header sent with every request.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = 8.0,
        max_chars: int = DEFAULT_MAX_CHARS,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._timeout = timeout_seconds
        self._max_chars = max_chars
        self._headers = {
            "User-Agent": user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
        }

    async def fetch(
        self, url: str, client: httpx.AsyncClient | None = None
    ) -> ExtractedArticle | None:
        """Fetch one URL and extract its article text.

        Args:
            url: Page to fetch.
            client: Shared client for batch fetches; a private one is opened if omitted.

        Returns:
            The extracted article, or None if the page could not be retrieved.
        """
        if client is None:
            async with self._client() as own_client:
                return await self.fetch(url, own_client)

        try:
            response = await asyncio.wait_for(client.get(url), timeout=self._timeout)
        except TimeoutError:
            logger.warning("Timed out fetching %s after %.1fs", url, self._timeout)
            return None
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("Error fetching %s: %s", url, e)
            return None

        if not response.is_success:
            logger.warning("Failed to fetch %s: HTTP %d", url, response.status_code)
            return None

        content_type = response.headers.get("content-type", "")
        if content_type and "html" not in content_type and "text" not in content_type:
            logger.warning("Skipping %s: unsupported content type %s", url, content_type)
            return None

        return extract_article(response.text, url, max_chars=self._max_chars)

    async def fetch_all(self, urls: list[str]) -> tuple[list[ExtractedArticle | None], Usage]:
        """Fetch every URL concurrently and wait for all of them.

        Args:
            urls: Pages to fetch.

        Returns:
            Tuple of (one slot per input URL in input order, usage).
        """
        if not urls:
            return ([], Usage())

        async with self._client() as client:
            results = await asyncio.gather(
                *(self.fetch(url, client) for url in urls), return_exceptions=True
            )

        articles: list[ExtractedArticle | None] = []
        for url, result in zip(urls, results, strict=True):
            if isinstance(result, BaseException):
                logger.warning("Unexpected error fetching %s: %s", url, result)
                articles.append(None)
            else:
                articles.append(result)

        fetched = sum(1 for a in articles if a is not None)
        logger.info("Fetched %d of %d article pages", fetched, len(urls))
        return (articles, Usage(page_fetches=len(urls)))

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._timeout,
            headers=self._headers,
            follow_redirects=True,
        )


def select_qualifying(
    articles: list[ExtractedArticle | None], min_chars: int
) -> list[ExtractedArticle]:
    """Keep fetched articles whose body is longer than ``min_chars``."""
    return [a for a in articles if a is not None and len(a.body) > min_chars]
