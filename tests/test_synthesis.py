"""Tests for the synthesis engine: prompt, tolerant parsing and the Claude call."""

import json
from unittest.mock import AsyncMock, MagicMock

import anthropic
import httpx
import pytest

from eventscope.data import ExtractedArticle, SearchResult, SynthesizedDetails
from eventscope.errors import SynthesisError, SynthesisFormatError
from eventscope.synthesis import (
    ClaudeSynthesizer,
    backfill_details,
    build_prompt,
    extract_embedded_json,
    select_articles,
)


def _article(url: str, body: str, domain: str = "example.com") -> ExtractedArticle:
    return ExtractedArticle(url=url, title=f"Title {url}", body=body, source_domain=domain)


def _make_mock_client(text: str) -> MagicMock:
    """Create a mock Anthropic client returning a single text block."""
    block = MagicMock()
    block.text = text
    response = MagicMock()
    response.content = [block]
    response.usage = MagicMock(input_tokens=1200, output_tokens=300)

    client = MagicMock()
    client.messages.create = AsyncMock(return_value=response)
    return client


class TestExtractEmbeddedJson:
    """Tests for tolerant JSON extraction."""

    def test_plain_object(self) -> None:
        assert extract_embedded_json('{"a": 1}') == {"a": 1}

    def test_code_fence_and_prose(self) -> None:
        text = 'Here you go:\n```json\n{"location": "Springfield", "n": {"x": 1}}\n```\nThanks!'
        assert extract_embedded_json(text) == {"location": "Springfield", "n": {"x": 1}}

    def test_no_object(self) -> None:
        with pytest.raises(SynthesisFormatError):
            extract_embedded_json("I could not find anything.")

    def test_invalid_json(self) -> None:
        with pytest.raises(SynthesisFormatError):
            extract_embedded_json('{"location": "Springfield",}')

    def test_closing_brace_before_opening(self) -> None:
        with pytest.raises(SynthesisFormatError):
            extract_embedded_json("} nothing {")


class TestBackfillDetails:
    """Tests for schema completeness."""

    def test_missing_fields_become_empty(self) -> None:
        details = backfill_details({"location": "Springfield"})
        assert details == SynthesizedDetails(
            location="Springfield", details="", accused=(), victims=(), timeline=()
        )

    def test_null_and_wrong_shapes_are_coerced(self) -> None:
        details = backfill_details(
            {
                "location": None,
                "details": 42,
                "accused": "Acme Corp",
                "victims": ["Worker A", "", None, 7],
                "timeline": None,
            }
        )
        assert details.location == ""
        assert details.details == "42"
        assert details.accused == ("Acme Corp",)
        assert details.victims == ("Worker A", "7")
        assert details.timeline == ()


class TestPrompt:
    """Tests for article selection and prompt rendering."""

    def test_select_articles_longest_first_stable(self) -> None:
        articles = [
            _article("https://a.com", "x" * 10),
            _article("https://b.com", "x" * 30),
            _article("https://c.com", "x" * 10),
            _article("https://d.com", "x" * 20),
        ]
        selected = select_articles(articles, 3)
        assert [a.url for a in selected] == ["https://b.com", "https://d.com", "https://a.com"]

    def test_build_prompt_is_deterministic_and_truncates(self) -> None:
        articles = [_article("https://a.com", "A" * 50, domain="a.com")]
        snippets = [SearchResult(title="t", url="https://s.com", snippet="A snippet")]
        prompt = build_prompt(articles, snippets, "Example factory fire 2023", article_chars=20)

        again = build_prompt(articles, snippets, "Example factory fire 2023", article_chars=20)
        assert prompt == again
        assert '"Example factory fire 2023"' in prompt
        assert "=== ARTICLE 1: A.COM ===" in prompt
        assert "A" * 20 in prompt
        assert "A" * 21 not in prompt
        assert "1. A snippet" in prompt
        assert '"timeline"' in prompt


class TestClaudeSynthesizer:
    """Tests for ClaudeSynthesizer."""

    async def test_partial_response_is_backfilled(self) -> None:
        client = _make_mock_client('{"location": "Springfield"}')
        synthesizer = ClaudeSynthesizer(client, model="claude-haiku-4-5-20251001")

        details, usage = await synthesizer.synthesize(
            [_article("https://a.com", "body " * 40)], [], "Springfield fire"
        )

        assert details.location == "Springfield"
        assert details.details == ""
        assert details.accused == ()
        assert details.victims == ()
        assert details.timeline == ()
        assert usage.input_tokens == 1200
        assert usage.output_tokens == 300
        assert usage.api_calls[0].model == "claude-haiku-4-5-20251001"

    async def test_single_user_call_with_low_temperature(self) -> None:
        client = _make_mock_client(json.dumps({"location": "X"}))
        synthesizer = ClaudeSynthesizer(client, temperature=0.1, max_tokens=3000, max_snippets=1)
        snippets = [
            SearchResult(title="t1", url="https://s1.com", snippet="first snippet"),
            SearchResult(title="t2", url="https://s2.com", snippet="second snippet"),
        ]

        await synthesizer.synthesize([_article("https://a.com", "body")], snippets, "q")

        client.messages.create.assert_awaited_once()
        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["temperature"] == 0.1
        assert kwargs["max_tokens"] == 3000
        assert len(kwargs["messages"]) == 1
        assert kwargs["messages"][0]["role"] == "user"
        assert "first snippet" in kwargs["messages"][0]["content"]
        assert "second snippet" not in kwargs["messages"][0]["content"]

    async def test_unparseable_output_raises_format_error(self) -> None:
        synthesizer = ClaudeSynthesizer(_make_mock_client("Sorry, no JSON today."))
        with pytest.raises(SynthesisFormatError):
            await synthesizer.synthesize([_article("https://a.com", "body")], [], "q")

    async def test_empty_output_raises_format_error(self) -> None:
        synthesizer = ClaudeSynthesizer(_make_mock_client("   "))
        with pytest.raises(SynthesisFormatError):
            await synthesizer.synthesize([_article("https://a.com", "body")], [], "q")

    async def test_api_error_raises_synthesis_error(self) -> None:
        client = MagicMock()
        client.messages.create = AsyncMock(
            side_effect=anthropic.APIConnectionError(
                request=httpx.Request("POST", "https://api.anthropic.com/v1/messages")
            )
        )
        synthesizer = ClaudeSynthesizer(client)
        with pytest.raises(SynthesisError) as exc_info:
            await synthesizer.synthesize([_article("https://a.com", "body")], [], "q")
        assert not isinstance(exc_info.value, SynthesisFormatError)
        client.messages.create.assert_awaited_once()
