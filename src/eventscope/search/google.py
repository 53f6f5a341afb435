"""Google Programmable Search (Custom Search JSON API) client."""

import asyncio
import json
import logging
import os
from typing import Any

import httpx

from eventscope.data import SearchResult, Usage
from eventscope.errors import ConfigurationError

GOOGLE_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"
MAX_PAGE_SIZE = 10  # API limit for ``num``

# Metatag keys tried in order when looking for a publication date.
PUBLISHED_DATE_METATAGS = (
    "article:published_time",
    "og:updated_time",
    "article:modified_time",
    "pubdate",
    "date",
)

IMAGE_LINK_TOKENS = (".jpg", ".jpeg", ".png", ".webp", ".gif", "image")
IMAGE_LINK_EXCLUDES = ("favicon", "/logo", "/icon")

logger = logging.getLogger(__name__)


class GoogleSearcher:
    """Search the web and images with the Google Custom Search JSON API.

    Web search is paginated sequentially with a short delay between pages;
    each page is fault-tolerant on its own. Image search is supplementary
    and degrades to an empty list on any problem.

    Args:
        api_key: API key (defaults to GOOGLE_API_KEY env var).
        search_engine_id: Engine id (defaults to GOOGLE_SEARCH_ENGINE_ID env var).
        pages: Number of result pages to request for web search.
        page_size: Results per page (max 10).
        page_delay_seconds: Pause between consecutive page requests.
        timeout_seconds: Timeout for web search requests.
        image_timeout_seconds: Timeout for the image search request.
        max_images: Maximum image links returned.
        recent_results: Results requested by ``search_recent``.
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        search_engine_id: str | None = None,
        pages: int = 2,
        page_size: int = 10,
        page_delay_seconds: float = 0.3,
        timeout_seconds: float = 15.0,
        image_timeout_seconds: float = 10.0,
        max_images: int = 8,
        recent_results: int = 10,
    ) -> None:
        self._api_key = api_key or os.environ.get("GOOGLE_API_KEY")
        self._engine_id = search_engine_id or os.environ.get("GOOGLE_SEARCH_ENGINE_ID")
        self._pages = pages
        self._page_size = min(page_size, MAX_PAGE_SIZE)
        self._page_delay = page_delay_seconds
        self._timeout = timeout_seconds
        self._image_timeout = image_timeout_seconds
        self._max_images = max_images
        self._recent_results = min(recent_results, MAX_PAGE_SIZE)

    @property
    def has_credentials(self) -> bool:
        return bool(self._api_key and self._engine_id)

    async def search_web(self, query: str) -> tuple[list[SearchResult], Usage]:
        """Search the web, accumulating results across pages.

        Args:
            query: Free-text search query.

        Returns:
            Tuple of (results in relevance order, usage).
        """
        self._require_credentials()

        results: list[SearchResult] = []
        requests = 0
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            for page in range(1, self._pages + 1):
                params = self._base_params(query)
                params["num"] = self._page_size
                params["start"] = (page - 1) * self._page_size + 1

                requests += 1
                data = await self._get_json(client, params, label=f"web page {page}")
                if data is not None:
                    page_results = _parse_items(data)
                    logger.info("Page %d: found %d results", page, len(page_results))
                    results.extend(page_results)

                if page < self._pages:
                    await asyncio.sleep(self._page_delay)

        logger.info("Total search results for %r: %d", query, len(results))
        return (results, Usage(search_requests=requests))

    async def search_images(self, query: str) -> tuple[list[str], Usage]:
        """Search for content images related to the query.

        Args:
            query: Free-text search query.

        Returns:
            Tuple of (image URLs, usage). Empty on any failure.
        """
        if not self.has_credentials:
            logger.warning("Google credentials not configured, skipping image search")
            return ([], Usage())

        params = self._base_params(query)
        params.update(
            {"searchType": "image", "num": MAX_PAGE_SIZE, "safe": "active", "imgSize": "medium"}
        )

        async with httpx.AsyncClient(timeout=self._image_timeout) as client:
            data = await self._get_json(client, params, label="image search")

        usage = Usage(image_requests=1)
        if data is None:
            return ([], usage)

        items = data.get("items")
        if not isinstance(items, list):
            logger.warning("No image items found in response")
            return ([], usage)

        links = [item.get("link") for item in items if isinstance(item, dict)]
        images = [link for link in links if isinstance(link, str) and is_image_link(link)]
        images = images[: self._max_images]
        logger.info("Found %d valid image links", len(images))
        return (images, usage)

    async def search_recent(self, query: str, *, days: int) -> tuple[list[SearchResult], Usage]:
        """Search for results from the last ``days`` days, newest first.

        Args:
            query: Free-text search query.
            days: Size of the recency window (at least 1).

        Returns:
            Tuple of (results with ``published_at`` where known, usage).
        """
        self._require_credentials()

        params = self._base_params(query)
        params.update(
            {
                "num": self._recent_results,
                "sort": "date",
                "dateRestrict": f"d{max(days, 1)}",
            }
        )

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            data = await self._get_json(client, params, label="recent search")

        usage = Usage(search_requests=1)
        if data is None:
            return ([], usage)

        results = [r for r in _parse_items(data) if r.title and r.snippet]
        logger.info("Retrieved %d recent results (window %d days)", len(results), days)
        return (results, usage)

    def _require_credentials(self) -> None:
        if not self.has_credentials:
            raise ConfigurationError(
                "Google search credentials required. "
                "Set GOOGLE_API_KEY and GOOGLE_SEARCH_ENGINE_ID env vars."
            )

    def _base_params(self, query: str) -> dict[str, str | int]:
        return {
            "key": self._api_key or "",
            "cx": self._engine_id or "",
            "q": query,
        }

    async def _get_json(
        self,
        client: httpx.AsyncClient,
        params: dict[str, str | int],
        *,
        label: str,
    ) -> dict[str, Any] | None:
        """Issue one request and return its decoded payload, or None on any failure."""
        try:
            response = await client.get(GOOGLE_SEARCH_URL, params=params)
        except httpx.HTTPError as e:
            logger.warning("Error on %s: %s", label, e)
            return None

        if not response.is_success:
            logger.warning("%s failed with status %d", label.capitalize(), response.status_code)
            return None

        data = decode_json_body(response.text)
        if data is None:
            logger.warning("Invalid response body for %s, skipping", label)
            return None
        if "error" in data:
            logger.warning("API error on %s: %s", label, data["error"])
            return None
        return data


def decode_json_body(text: str) -> dict[str, Any] | None:
    """Decode a provider response body, rejecting HTML error pages.

    Returns:
        The decoded JSON object, or None if the body is HTML, not JSON,
        or not a JSON object.
    """
    stripped = text.strip()
    lowered = stripped[:15].lower()
    if lowered.startswith("<!doctype") or lowered.startswith("<html"):
        return None
    try:
        data = json.loads(stripped)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    return data


def is_image_link(link: str) -> bool:
    """Whether a link looks like a content image rather than a site asset."""
    lowered = link.lower()
    if any(excluded in lowered for excluded in IMAGE_LINK_EXCLUDES):
        return False
    return any(token in lowered for token in IMAGE_LINK_TOKENS)


def _parse_items(data: dict[str, Any]) -> list[SearchResult]:
    items = data.get("items")
    if not isinstance(items, list):
        return []

    results: list[SearchResult] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        link = item.get("link")
        if not isinstance(link, str) or not link:
            continue
        results.append(
            SearchResult(
                title=str(item.get("title") or "").strip(),
                url=link,
                snippet=str(item.get("snippet") or "").strip(),
                display_domain=str(item.get("displayLink") or ""),
                published_at=_published_date(item),
            )
        )
    return results


def _published_date(item: dict[str, Any]) -> str | None:
    """Pick the publication date from an item's pagemap, if present."""
    pagemap = item.get("pagemap")
    if not isinstance(pagemap, dict):
        return None

    metatags = _first_entry(pagemap.get("metatags"))
    for key in PUBLISHED_DATE_METATAGS:
        value = metatags.get(key)
        if isinstance(value, str) and value:
            return value

    for section in ("newsarticle", "article"):
        value = _first_entry(pagemap.get(section)).get("datepublished")
        if isinstance(value, str) and value:
            return value
    return None


def _first_entry(value: Any) -> dict[str, Any]:
    if isinstance(value, list) and value and isinstance(value[0], dict):
        return value[0]
    return {}
