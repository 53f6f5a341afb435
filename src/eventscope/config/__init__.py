"""Configuration module for eventscope."""

from eventscope.config.factory import (
    Components,
    create_from_config,
    create_searcher,
    create_store,
)
from eventscope.config.loader import get_default_config_path, load_config
from eventscope.config.models import (
    EventscopeConfig,
    ExaSearcherConfig,
    FetcherConfig,
    FilterConfig,
    GoogleSearcherConfig,
    LoggingConfig,
    MemoryStoreConfig,
    PipelineConfig,
    SearcherConfig,
    SeedEventConfig,
    StoreConfig,
    SupabaseStoreConfig,
    SynthesisConfig,
    UpdatesConfig,
)

__all__ = [
    "Components",
    "EventscopeConfig",
    "ExaSearcherConfig",
    "FetcherConfig",
    "FilterConfig",
    "GoogleSearcherConfig",
    "LoggingConfig",
    "MemoryStoreConfig",
    "PipelineConfig",
    "SearcherConfig",
    "SeedEventConfig",
    "StoreConfig",
    "SupabaseStoreConfig",
    "SynthesisConfig",
    "UpdatesConfig",
    "create_from_config",
    "create_searcher",
    "create_store",
    "get_default_config_path",
    "load_config",
]
