"""Pydantic configuration models for eventscope components."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from eventscope.fetch import DEFAULT_USER_AGENT
from eventscope.llm import DEFAULT_MODEL
from eventscope.search import DEFAULT_DENYLIST

# ============================================================
# Searcher Configs
# ============================================================


class GoogleSearcherConfig(BaseModel):
    """Configuration for GoogleSearcher."""

    type: Literal["google"] = "google"
    pages: int = Field(default=2, ge=1)
    page_size: int = Field(default=10, ge=1, le=10)
    page_delay_seconds: float = Field(default=0.3, ge=0)
    timeout_seconds: float = Field(default=15.0, gt=0)
    image_timeout_seconds: float = Field(default=10.0, gt=0)
    max_images: int = Field(default=8, ge=0)
    recent_results: int = Field(default=10, ge=1, le=10)

    model_config = {"frozen": True}


class ExaSearcherConfig(BaseModel):
    """Configuration for ExaSearcher."""

    type: Literal["exa"] = "exa"
    num_results: int = Field(default=20, ge=1)

    model_config = {"frozen": True}


SearcherConfig = Annotated[
    GoogleSearcherConfig | ExaSearcherConfig,
    Field(discriminator="type"),
]


# ============================================================
# Fetch / Filter Configs
# ============================================================


class FetcherConfig(BaseModel):
    """Configuration for ArticleFetcher."""

    timeout_seconds: float = Field(default=8.0, gt=0)
    max_chars: int = Field(default=2000, ge=0)
    user_agent: str = DEFAULT_USER_AGENT

    model_config = {"frozen": True}


class FilterConfig(BaseModel):
    """Configuration for search result filtering."""

    denylist: tuple[str, ...] = DEFAULT_DENYLIST
    max_fetch: int = Field(default=12, ge=0)

    model_config = {"frozen": True}


# ============================================================
# LLM Configs
# ============================================================


class SynthesisConfig(BaseModel):
    """Configuration for ClaudeSynthesizer."""

    model: str = DEFAULT_MODEL
    max_articles: int = Field(default=8, ge=1)
    max_snippets: int = Field(default=5, ge=0)
    article_chars: int = Field(default=1500, ge=1)
    temperature: float = Field(default=0.1, ge=0, le=1)
    max_tokens: int = Field(default=3000, ge=1)

    model_config = {"frozen": True}


class UpdatesConfig(BaseModel):
    """Configuration for UpdateDetector."""

    model: str = DEFAULT_MODEL
    temperature: float = Field(default=0.3, ge=0, le=1)
    max_tokens: int = Field(default=1000, ge=1)

    model_config = {"frozen": True}


class PipelineConfig(BaseModel):
    """Configuration shared by the pipelines."""

    min_content_chars: int = Field(default=50, ge=0)

    model_config = {"frozen": True}


# ============================================================
# Store Configs
# ============================================================


class SeedEventConfig(BaseModel):
    """An event preloaded into the in-memory store."""

    event_id: str
    query: str
    title: str = ""

    model_config = {"frozen": True}


class MemoryStoreConfig(BaseModel):
    """Process-local store, for tests and local runs."""

    type: Literal["memory"] = "memory"
    events: list[SeedEventConfig] = Field(default_factory=list)

    model_config = {"frozen": True}


class SupabaseStoreConfig(BaseModel):
    """Supabase-backed store; credentials come from the named env vars."""

    type: Literal["supabase"] = "supabase"
    url_env: str = "SUPABASE_URL"
    key_env: str = "SUPABASE_SERVICE_ROLE_KEY"
    events_table: str = "events"
    details_table: str = "event_details"
    updates_table: str = "event_updates"

    model_config = {"frozen": True}


StoreConfig = Annotated[
    MemoryStoreConfig | SupabaseStoreConfig,
    Field(discriminator="type"),
]


# ============================================================
# Logging Config
# ============================================================


class LoggingConfig(BaseModel):
    """Configuration for intermediate pipeline logging."""

    enabled: bool = False
    log_dir: str = "logs"

    model_config = {"frozen": True}


# ============================================================
# Root Config
# ============================================================


class EventscopeConfig(BaseModel):
    """Root configuration for eventscope."""

    searcher: SearcherConfig = Field(default_factory=GoogleSearcherConfig)
    fetcher: FetcherConfig = Field(default_factory=FetcherConfig)
    filter: FilterConfig = Field(default_factory=FilterConfig)
    synthesis: SynthesisConfig = Field(default_factory=SynthesisConfig)
    updates: UpdatesConfig = Field(default_factory=UpdatesConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    store: StoreConfig = Field(default_factory=MemoryStoreConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}
