"""Cost estimation for pipeline runs.

Uses a static per-model price table for Anthropic models and flat
per-request prices for the search provider.
"""

import logging
from dataclasses import dataclass

from eventscope.data import Usage

logger = logging.getLogger(__name__)

SEARCH_REQUEST_PRICE = 5.0 / 1000  # Custom Search: $5 per 1,000 queries


@dataclass(frozen=True)
class ModelPricing:
    """Per-model pricing in USD per million tokens."""

    input_per_mtok: float
    output_per_mtok: float


DEFAULT_PRICES: dict[str, ModelPricing] = {
    "claude-haiku-4-5": ModelPricing(1.0, 5.0),
    "claude-haiku-3-5": ModelPricing(0.80, 4.0),
    "claude-sonnet-4-5": ModelPricing(3.0, 15.0),
    "claude-sonnet-4": ModelPricing(3.0, 15.0),
    "claude-opus-4-1": ModelPricing(15.0, 75.0),
    "claude-opus-4": ModelPricing(15.0, 75.0),
}


def get_model_pricing(
    model_id: str,
    prices: dict[str, ModelPricing] = DEFAULT_PRICES,
) -> ModelPricing:
    """Look up pricing by model ID using longest-prefix matching.

    E.g. ``'claude-haiku-4-5-20251001'`` matches ``'claude-haiku-4-5'``.
    Falls back to Haiku 4.5 pricing if nothing matches.
    """
    if model_id in prices:
        return prices[model_id]

    best_match: str | None = None
    for key in prices:
        if model_id.startswith(key) and (best_match is None or len(key) > len(best_match)):
            best_match = key

    if best_match is not None:
        return prices[best_match]

    logger.warning("No pricing found for model '%s', using Haiku 4.5 fallback", model_id)
    return DEFAULT_PRICES["claude-haiku-4-5"]


def estimate_usage_cost(
    usage: Usage,
    prices: dict[str, ModelPricing] = DEFAULT_PRICES,
) -> float:
    """Estimate total cost in USD for accumulated usage."""
    total = 0.0
    for call in usage.api_calls:
        pricing = get_model_pricing(call.model, prices)
        total += (call.input_tokens / 1_000_000) * pricing.input_per_mtok
        total += (call.output_tokens / 1_000_000) * pricing.output_per_mtok
    total += (usage.search_requests + usage.image_requests) * SEARCH_REQUEST_PRICE
    return total
