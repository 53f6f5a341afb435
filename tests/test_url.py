"""Tests for URL helpers."""

import pytest

from eventscope.url import domain_matches, extract_domain


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://www.example.com/path", "example.com"),
        ("https://News.Example.co.uk/a?b=c", "news.example.co.uk"),
        ("http://example.com:8080/x", "example.com"),
        ("not a url", "unknown"),
        ("", "unknown"),
    ],
)
def test_extract_domain(url: str, expected: str) -> None:
    assert extract_domain(url) == expected


def test_domain_matches_exact_and_subdomain() -> None:
    assert domain_matches("reddit.com", "reddit.com")
    assert domain_matches("old.reddit.com", "reddit.com")
    assert domain_matches("www.reddit.com", "reddit.com")


def test_domain_matches_rejects_lookalikes() -> None:
    assert not domain_matches("notreddit.com", "reddit.com")
    assert not domain_matches("reddit.com.evil.net", "reddit.com")
    assert not domain_matches("box.com", "x.com")
