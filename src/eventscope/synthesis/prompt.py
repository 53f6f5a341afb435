"""Deterministic prompt construction for event synthesis."""

import json

from eventscope.data import ExtractedArticle, SearchResult

DETAILS_TEMPLATE: dict[str, object] = {
    "location": "string - Location where event occurred",
    "details": "string - Key details of what happened",
    "accused": ["array of strings - Names of accused parties"],
    "victims": ["array of strings - Names of victims"],
    "timeline": ["array of strings - Key events with dates"],
}

PROMPT_TEMPLATE = """\
You are an expert analyst. Extract key information from the provided content about: "{query}"

MAIN ARTICLES:
{articles}

ADDITIONAL SNIPPETS:
{snippets}

Extract accurate information and return ONLY a valid JSON object following this template:

{template}

INSTRUCTIONS:
1. Use only information explicitly stated in the content
2. Be concise but accurate
3. If information is not available, use empty strings or arrays
4. Ensure proper JSON formatting
5. Focus on the most important details

JSON Response:"""


def select_articles(articles: list[ExtractedArticle], limit: int) -> list[ExtractedArticle]:
    """Keep the ``limit`` articles with the longest bodies.

    Ties keep their input (fetch priority) order.
    """
    return sorted(articles, key=lambda a: len(a.body), reverse=True)[: max(limit, 0)]


def _format_article(article: ExtractedArticle, index: int, max_chars: int) -> str:
    return (
        f"=== ARTICLE {index}: {article.source_domain.upper()} ===\n"
        f"Title: {article.title}\n"
        f"Content: {article.body[:max_chars]}\n"
        "---"
    )


def build_prompt(
    articles: list[ExtractedArticle],
    snippets: list[SearchResult],
    query: str,
    *,
    article_chars: int = 1500,
) -> str:
    """Render the synthesis prompt.

    The same inputs always produce the same prompt.

    Args:
        articles: Articles to embed, already selected and ordered.
        snippets: Supplementary search results; their snippets are listed.
        query: The event query.
        article_chars: Per-article content cap inside the prompt.
    """
    article_text = "\n\n".join(
        _format_article(article, i, article_chars) for i, article in enumerate(articles, 1)
    )
    snippet_text = "\n".join(f"{i}. {result.snippet}" for i, result in enumerate(snippets, 1))
    return PROMPT_TEMPLATE.format(
        query=query,
        articles=article_text or "(none)",
        snippets=snippet_text or "(none)",
        template=json.dumps(DETAILS_TEMPLATE, indent=2),
    )
