from eventscope.search.base import WebSearcher
from eventscope.search.exa import ExaSearcher
from eventscope.search.filter import DEFAULT_DENYLIST, filter_results, select_for_fetch
from eventscope.search.google import GoogleSearcher

__all__ = [
    "DEFAULT_DENYLIST",
    "ExaSearcher",
    "GoogleSearcher",
    "WebSearcher",
    "filter_results",
    "select_for_fetch",
]
