"""Helpers shared by the Anthropic-backed components."""

import os
from typing import Any

import anthropic

from eventscope.data import APICallUsage, Usage
from eventscope.errors import ConfigurationError

DEFAULT_MODEL = "claude-haiku-4-5-20251001"


def create_client(api_key: str | None = None) -> anthropic.AsyncAnthropic:
    """Build the process-wide Anthropic client.

    Args:
        api_key: API key (defaults to CLAUDE_API_KEY, then ANTHROPIC_API_KEY env var).

    Raises:
        ConfigurationError: If no key can be resolved.
    """
    resolved_key = (
        api_key or os.environ.get("CLAUDE_API_KEY") or os.environ.get("ANTHROPIC_API_KEY")
    )
    if not resolved_key:
        raise ConfigurationError(
            "Anthropic API key required. Set CLAUDE_API_KEY or ANTHROPIC_API_KEY env var."
        )
    return anthropic.AsyncAnthropic(api_key=resolved_key)


def response_text(response: Any) -> str:
    """Concatenate the text blocks of a messages response."""
    parts: list[str] = []
    for block in response.content:
        text = getattr(block, "text", None)
        if isinstance(text, str):
            parts.append(text)
    return "".join(parts)


def usage_from_response(model: str, response: Any) -> Usage:
    """Token usage of a messages response."""
    return Usage(
        api_calls=[
            APICallUsage(
                model=model,
                input_tokens=getattr(response.usage, "input_tokens", 0) or 0,
                output_tokens=getattr(response.usage, "output_tokens", 0) or 0,
            )
        ]
    )
