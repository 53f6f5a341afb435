"""Claude-backed synthesis of structured event details."""

import logging

import anthropic

from eventscope.data import ExtractedArticle, SearchResult, SynthesizedDetails, Usage
from eventscope.errors import SynthesisError, SynthesisFormatError
from eventscope.llm import DEFAULT_MODEL, response_text, usage_from_response
from eventscope.synthesis.parsing import backfill_details, extract_embedded_json
from eventscope.synthesis.prompt import build_prompt, select_articles

logger = logging.getLogger(__name__)


class ClaudeSynthesizer:
    """Turn extracted articles into structured event details with one Claude call.

    The call is made once with a low temperature; failures are reported to
    the caller and never retried here.

    Args:
        client: Shared Anthropic client.
        model: Anthropic model to use.
        max_articles: Number of longest articles embedded in the prompt.
        max_snippets: Number of search snippets appended as extra context.
        article_chars: Per-article content cap inside the prompt.
        temperature: Sampling temperature.
        max_tokens: Output token budget.
    """

    def __init__(
        self,
        client: anthropic.AsyncAnthropic,
        *,
        model: str = DEFAULT_MODEL,
        max_articles: int = 8,
        max_snippets: int = 5,
        article_chars: int = 1500,
        temperature: float = 0.1,
        max_tokens: int = 3000,
    ) -> None:
        self._client = client
        self._model = model
        self._max_articles = max_articles
        self._max_snippets = max_snippets
        self._article_chars = article_chars
        self._temperature = temperature
        self._max_tokens = max_tokens

    def prompt_for(
        self,
        articles: list[ExtractedArticle],
        snippets: list[SearchResult],
        query: str,
    ) -> str:
        """Build the exact prompt ``synthesize`` would send."""
        return build_prompt(
            select_articles(articles, self._max_articles),
            snippets[: self._max_snippets],
            query,
            article_chars=self._article_chars,
        )

    async def synthesize(
        self,
        articles: list[ExtractedArticle],
        snippets: list[SearchResult],
        query: str,
    ) -> tuple[SynthesizedDetails, Usage]:
        """Synthesize structured details from article text.

        Args:
            articles: Content-bearing articles.
            snippets: Filtered search results in relevance order.
            query: The event query.

        Returns:
            Tuple of (schema-complete details, usage).

        Raises:
            SynthesisError: If the model call fails or returns nothing.
            SynthesisFormatError: If the output holds no parseable JSON object.
        """
        prompt = self.prompt_for(articles, snippets, query)

        try:
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=self._max_tokens,
                temperature=self._temperature,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as e:
            raise SynthesisError(f"Synthesis request failed: {e}") from e

        usage = usage_from_response(self._model, response)
        text = response_text(response)
        if not text.strip():
            raise SynthesisFormatError("Empty response from model")

        details = backfill_details(extract_embedded_json(text))
        logger.info(
            "Synthesized details: %d accused, %d victims, %d timeline entries",
            len(details.accused),
            len(details.victims),
            len(details.timeline),
        )
        return (details, usage)
