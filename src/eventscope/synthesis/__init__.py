"""Synthesis of structured event details."""

from eventscope.synthesis.base import Synthesizer
from eventscope.synthesis.claude import ClaudeSynthesizer
from eventscope.synthesis.parsing import backfill_details, extract_embedded_json
from eventscope.synthesis.prompt import DETAILS_TEMPLATE, build_prompt, select_articles

__all__ = [
    "DETAILS_TEMPLATE",
    "ClaudeSynthesizer",
    "Synthesizer",
    "backfill_details",
    "build_prompt",
    "extract_embedded_json",
    "select_articles",
]
