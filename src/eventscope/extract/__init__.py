"""HTML content extraction."""

from eventscope.extract.html import DEFAULT_MAX_CHARS, extract_article

__all__ = [
    "DEFAULT_MAX_CHARS",
    "extract_article",
]
