"""Article fetching."""

from eventscope.fetch.article import DEFAULT_USER_AGENT, ArticleFetcher, select_qualifying

__all__ = [
    "DEFAULT_USER_AGENT",
    "ArticleFetcher",
    "select_qualifying",
]
