from typing import Protocol

from eventscope.data import SearchResult, Usage


class WebSearcher(Protocol):
    """Interface for web and image search providers."""

    async def search_web(self, query: str) -> tuple[list[SearchResult], Usage]:
        """Retrieve ranked web results for a query.

        Args:
            query: Free-text search query.

        Returns:
            Tuple of (results in provider relevance order, usage).

        Raises:
            ConfigurationError: If provider credentials are missing.
        """
        ...

    async def search_images(self, query: str) -> tuple[list[str], Usage]:
        """Retrieve a small set of content image URLs for a query.

        Never fails: missing credentials or provider errors yield an empty list.
        """
        ...

    async def search_recent(self, query: str, *, days: int) -> tuple[list[SearchResult], Usage]:
        """Retrieve results restricted to the last ``days`` days, newest first.

        Results carry ``published_at`` where the provider exposes it.

        Raises:
            ConfigurationError: If provider credentials are missing.
        """
        ...
