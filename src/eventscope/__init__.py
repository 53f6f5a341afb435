"""eventscope: structured event details and incremental updates from web news."""

from eventscope.config import Components, EventscopeConfig, create_from_config, load_config
from eventscope.data import (
    APICallUsage,
    EventDetails,
    EventRecord,
    EventUpdate,
    ExtractedArticle,
    SearchResult,
    StoredEventDetails,
    SynthesizedDetails,
    UpdateAnalysis,
    UpdateDetection,
    Usage,
)
from eventscope.errors import (
    BadRequest,
    ConfigurationError,
    EventNotFound,
    FailureKind,
    NoContentExtracted,
    PipelineError,
    StoreError,
    SynthesisError,
    SynthesisFormatError,
)
from eventscope.extract import extract_article
from eventscope.fetch import ArticleFetcher, select_qualifying
from eventscope.pipeline import (
    DetailsPipeline,
    DetailsRunResult,
    RunFailure,
    RunStage,
    RunStats,
    UpdatePipeline,
    UpdateRunResult,
)
from eventscope.pricing import ModelPricing, estimate_usage_cost, get_model_pricing
from eventscope.run_logger import RunLogger
from eventscope.search import (
    ExaSearcher,
    GoogleSearcher,
    WebSearcher,
    filter_results,
    select_for_fetch,
)
from eventscope.store import EventStore, InMemoryEventStore, SupabaseEventStore
from eventscope.synthesis import (
    ClaudeSynthesizer,
    Synthesizer,
    backfill_details,
    extract_embedded_json,
)
from eventscope.updates import UpdateDetector
from eventscope.url import extract_domain

__all__ = [
    # Models
    "APICallUsage",
    "EventDetails",
    "EventRecord",
    "EventUpdate",
    "ExtractedArticle",
    "SearchResult",
    "StoredEventDetails",
    "SynthesizedDetails",
    "UpdateAnalysis",
    "UpdateDetection",
    "Usage",
    # Errors
    "BadRequest",
    "ConfigurationError",
    "EventNotFound",
    "FailureKind",
    "NoContentExtracted",
    "PipelineError",
    "StoreError",
    "SynthesisError",
    "SynthesisFormatError",
    # Pricing
    "ModelPricing",
    "estimate_usage_cost",
    "get_model_pricing",
    # Functions
    "backfill_details",
    "extract_article",
    "extract_domain",
    "extract_embedded_json",
    "filter_results",
    "select_for_fetch",
    "select_qualifying",
    # Protocols
    "EventStore",
    "Synthesizer",
    "WebSearcher",
    # Components
    "ArticleFetcher",
    "ClaudeSynthesizer",
    "ExaSearcher",
    "GoogleSearcher",
    "InMemoryEventStore",
    "SupabaseEventStore",
    "UpdateDetector",
    # Pipelines
    "DetailsPipeline",
    "DetailsRunResult",
    "RunFailure",
    "RunStage",
    "RunStats",
    "UpdatePipeline",
    "UpdateRunResult",
    # Logging
    "RunLogger",
    # Config
    "Components",
    "EventscopeConfig",
    "create_from_config",
    "load_config",
]
