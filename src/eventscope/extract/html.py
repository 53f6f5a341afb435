"""Article text extraction from raw HTML.

Pages are parsed with BeautifulSoup's lenient ``html.parser`` so malformed
third-party markup still yields text. The best-looking content region wins,
falling back to paragraphs and finally to the meta description.
"""

import re

from bs4 import BeautifulSoup

from eventscope.data import ExtractedArticle
from eventscope.url import extract_domain

DEFAULT_MAX_CHARS = 2000
MIN_BLOCK_CHARS = 100
MIN_PARAGRAPH_CHARS = 50

_CONTENT_CLASS_RE = re.compile(r"content|article|post", re.IGNORECASE)
_SPACE_RE = re.compile(r"\s+")

_PUBLISH_DATE_KEYS = ("article:published_time", "og:updated_time", "pubdate", "date")
_AUTHOR_KEYS = ("author", "article:author")


def _normalize_text(text: str) -> str:
    return _SPACE_RE.sub(" ", text.replace("\xa0", " ")).strip()


def _meta_tags(soup: BeautifulSoup) -> dict[str, str]:
    """Map ``name``/``property`` of every meta tag to its ``content``.

    The first occurrence of a key wins.
    """
    metas: dict[str, str] = {}
    for tag in soup.find_all("meta"):
        key = tag.get("name") or tag.get("property") or tag.get("itemprop")
        content = tag.get("content")
        if isinstance(key, str) and isinstance(content, str):
            metas.setdefault(key.lower(), _normalize_text(content))
    return metas


def _first_meta(metas: dict[str, str], keys: tuple[str, ...]) -> str | None:
    for key in keys:
        value = metas.get(key)
        if value:
            return value
    return None


def _longest_block(soup: BeautifulSoup) -> str:
    candidates = soup.find_all(["article", "main"])
    candidates += soup.find_all("div", class_=_CONTENT_CLASS_RE)
    blocks = [_normalize_text(tag.get_text(" ")) for tag in candidates]
    return max(blocks, key=len, default="")


def _paragraph_text(soup: BeautifulSoup) -> str:
    paragraphs = (_normalize_text(p.get_text(" ")) for p in soup.find_all("p"))
    return " ".join(p for p in paragraphs if p)


def extract_article(
    html_text: str, url: str, *, max_chars: int = DEFAULT_MAX_CHARS
) -> ExtractedArticle:
    """Produce a best-effort article from raw HTML.

    Pure and total: malformed or empty input yields an article with an empty
    or short body rather than an exception.

    Args:
        html_text: Raw page HTML.
        url: The page URL, used for the source domain.
        max_chars: Upper bound on the returned body length.

    Returns:
        The extracted article.
    """
    soup = BeautifulSoup(html_text or "", "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    metas = _meta_tags(soup)

    title = _normalize_text(soup.title.get_text()) if soup.title else ""

    body = _longest_block(soup)
    if len(body) < MIN_BLOCK_CHARS:
        body = _paragraph_text(soup) or body
    if len(body) < MIN_PARAGRAPH_CHARS:
        body = metas.get("description") or body

    return ExtractedArticle(
        url=url,
        title=title,
        body=body[: max(max_chars, 0)],
        source_domain=extract_domain(url),
        publish_date=_first_meta(metas, _PUBLISH_DATE_KEYS),
        author=_first_meta(metas, _AUTHOR_KEYS),
    )
