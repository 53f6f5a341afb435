"""URL handling utilities."""

from __future__ import annotations

import logging
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


def extract_domain(url: str) -> str:
    """Extract the host name from a URL.

    Args:
        url: The URL to extract the domain from.

    Returns:
        The lowercased host (without 'www.' prefix), or "unknown" if there is none.
    """
    try:
        host = urlparse(url).hostname or ""
    except ValueError:
        host = ""
    if not host:
        logger.debug("Could not get domain from url %s", url)
        return "unknown"
    if host.startswith("www."):
        host = host[4:]
    return host


def domain_matches(host: str, domain: str) -> bool:
    """Whether ``host`` is ``domain`` or one of its subdomains."""
    host = host.lower().removeprefix("www.")
    domain = domain.lower()
    return host == domain or host.endswith("." + domain)
