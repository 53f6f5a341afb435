from typing import Protocol

from eventscope.data import ExtractedArticle, SearchResult, SynthesizedDetails, Usage


class Synthesizer(Protocol):
    """Interface for turning article text into structured event details."""

    async def synthesize(
        self,
        articles: list[ExtractedArticle],
        snippets: list[SearchResult],
        query: str,
    ) -> tuple[SynthesizedDetails, Usage]:
        """Synthesize event details strictly from the supplied text.

        Args:
            articles: Content-bearing articles.
            snippets: Supplementary search results.
            query: The event query.

        Returns:
            Tuple of (details with every field present, usage).
        """
        ...
