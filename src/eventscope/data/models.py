"""Core data models for eventscope."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class SearchResult:
    """A single web search hit, keyed by its exact ``url``."""

    title: str
    url: str
    snippet: str = ""
    display_domain: str = ""
    published_at: str | None = None


@dataclass(frozen=True)
class ExtractedArticle:
    """Readable text pulled from one fetched article page."""

    url: str
    title: str
    body: str
    source_domain: str
    publish_date: str | None = None
    author: str | None = None


@dataclass(frozen=True)
class EventRecord:
    """An event as stored externally; ``last_updated_at`` is the watermark."""

    event_id: str
    query: str
    title: str = ""
    last_updated_at: datetime | None = None


@dataclass(frozen=True)
class SynthesizedDetails:
    """Structured fields produced by the LLM (no sources or images)."""

    location: str = ""
    details: str = ""
    accused: tuple[str, ...] = ()
    victims: tuple[str, ...] = ()
    timeline: tuple[str, ...] = ()


@dataclass(frozen=True)
class EventDetails:
    """The full structured record persisted for an event.

    ``sources`` is always derived from fetched, content-bearing article URLs,
    never from model output.
    """

    location: str = ""
    details: str = ""
    accused: tuple[str, ...] = ()
    victims: tuple[str, ...] = ()
    timeline: tuple[str, ...] = ()
    sources: tuple[str, ...] = ()
    images: tuple[str, ...] = ()

    @classmethod
    def from_synthesis(
        cls,
        synthesized: SynthesizedDetails,
        *,
        sources: list[str],
        images: list[str],
    ) -> "EventDetails":
        return cls(
            location=synthesized.location,
            details=synthesized.details,
            accused=synthesized.accused,
            victims=synthesized.victims,
            timeline=synthesized.timeline,
            sources=tuple(sources),
            images=tuple(images),
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EventDetails":
        def _list(key: str) -> tuple[str, ...]:
            value = data.get(key) or []
            return tuple(str(v) for v in value)

        return cls(
            location=str(data.get("location") or ""),
            details=str(data.get("details") or ""),
            accused=_list("accused"),
            victims=_list("victims"),
            timeline=_list("timeline"),
            sources=_list("sources"),
            images=_list("images"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "location": self.location,
            "details": self.details,
            "accused": list(self.accused),
            "victims": list(self.victims),
            "timeline": list(self.timeline),
            "sources": list(self.sources),
            "images": list(self.images),
        }


@dataclass(frozen=True)
class StoredEventDetails:
    """Event details as read back from the store, with timestamps."""

    event_id: str
    details: EventDetails
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class EventUpdate:
    """A short analyst-style update about new developments. Append-only."""

    event_id: str
    title: str
    description: str
    update_date: datetime


@dataclass(frozen=True)
class UpdateAnalysis:
    """Raw structured output of the update summarizer."""

    title: str
    description: str
    relevance_score: float = 0.0
    key_insights: tuple[str, ...] = ()
    summary: str = ""


@dataclass(frozen=True)
class UpdateDetection:
    """Outcome of one incremental update check.

    ``update`` is None when nothing newer than the watermark was found.
    """

    update: EventUpdate | None
    analysis: UpdateAnalysis | None = None
    total_results: int = 0
    new_results: int = 0
    window_days: int = 1


@dataclass(frozen=True)
class APICallUsage:
    """Usage from a single LLM call; carries the model for price lookup."""

    model: str
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass
class Usage:
    """Accumulated external-service usage across pipeline components."""

    api_calls: list[APICallUsage] = field(default_factory=list)
    search_requests: int = 0
    image_requests: int = 0
    page_fetches: int = 0
    estimated_cost: float = 0.0

    @property
    def input_tokens(self) -> int:
        return sum(c.input_tokens for c in self.api_calls)

    @property
    def output_tokens(self) -> int:
        return sum(c.output_tokens for c in self.api_calls)

    def __add__(self, other: "Usage") -> "Usage":
        return Usage(
            api_calls=self.api_calls + other.api_calls,
            search_requests=self.search_requests + other.search_requests,
            image_requests=self.image_requests + other.image_requests,
            page_fetches=self.page_fetches + other.page_fetches,
            estimated_cost=self.estimated_cost + other.estimated_cost,
        )

    def __iadd__(self, other: "Usage") -> "Usage":
        self.api_calls.extend(other.api_calls)
        self.search_requests += other.search_requests
        self.image_requests += other.image_requests
        self.page_fetches += other.page_fetches
        self.estimated_cost += other.estimated_cost
        return self
