"""Search result deduplication and low-value domain filtering."""

import logging

from eventscope.data import SearchResult
from eventscope.url import domain_matches, extract_domain

logger = logging.getLogger(__name__)

DEFAULT_DENYLIST: tuple[str, ...] = (
    "reddit.com",
    "twitter.com",
    "x.com",
    "facebook.com",
    "youtube.com",
    "instagram.com",
    "tiktok.com",
    "pinterest.com",
)


def is_denied(result: SearchResult, denylist: tuple[str, ...] = DEFAULT_DENYLIST) -> bool:
    """Whether the result's link host or display domain is a denylisted platform."""
    hosts = [extract_domain(result.url)]
    if result.display_domain:
        hosts.append(result.display_domain)
    return any(domain_matches(host, denied) for host in hosts for denied in denylist)


def filter_results(
    results: list[SearchResult],
    denylist: tuple[str, ...] = DEFAULT_DENYLIST,
) -> list[SearchResult]:
    """Drop duplicate, denylisted and incomplete results.

    The first occurrence of each exact URL is kept and provider order is
    preserved, since that order becomes the fetch priority.

    Args:
        results: Raw results in provider relevance order.
        denylist: Domains (and their subdomains) to exclude.

    Returns:
        Filtered results in original order.
    """
    seen_urls: set[str] = set()
    filtered: list[SearchResult] = []

    for result in results:
        if result.url in seen_urls:
            continue
        seen_urls.add(result.url)

        if is_denied(result, denylist):
            continue
        if not result.title or not result.snippet:
            continue
        filtered.append(result)

    logger.info("Filtered %d raw results to %d", len(results), len(filtered))
    return filtered


def select_for_fetch(results: list[SearchResult], limit: int) -> list[SearchResult]:
    """Pick the highest-ranked results to fetch in full."""
    return results[: max(limit, 0)]
