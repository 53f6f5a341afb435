"""Factory functions to create components from configuration."""

from dataclasses import dataclass
from pathlib import Path

import anthropic

from eventscope.config.models import (
    EventscopeConfig,
    ExaSearcherConfig,
    GoogleSearcherConfig,
    MemoryStoreConfig,
    SearcherConfig,
    StoreConfig,
    SupabaseStoreConfig,
)
from eventscope.data import EventRecord
from eventscope.errors import ConfigurationError
from eventscope.fetch import ArticleFetcher
from eventscope.llm import create_client
from eventscope.pipeline import DetailsPipeline, UpdatePipeline
from eventscope.run_logger import RunLogger
from eventscope.search import ExaSearcher, GoogleSearcher, WebSearcher
from eventscope.store import EventStore, InMemoryEventStore, SupabaseEventStore
from eventscope.synthesis import ClaudeSynthesizer
from eventscope.updates import UpdateDetector


@dataclass(frozen=True)
class Components:
    """Every long-lived object a process needs, built once at startup."""

    store: EventStore
    searcher: WebSearcher
    details_pipeline: DetailsPipeline
    update_pipeline: UpdatePipeline
    run_logger: RunLogger | None = None


def create_searcher(config: SearcherConfig) -> WebSearcher:
    """Create a web searcher from config.

    Uses explicit type matching rather than getattr.
    """
    if isinstance(config, GoogleSearcherConfig):
        return GoogleSearcher(
            pages=config.pages,
            page_size=config.page_size,
            page_delay_seconds=config.page_delay_seconds,
            timeout_seconds=config.timeout_seconds,
            image_timeout_seconds=config.image_timeout_seconds,
            max_images=config.max_images,
            recent_results=config.recent_results,
        )
    if isinstance(config, ExaSearcherConfig):
        return ExaSearcher(num_results=config.num_results)
    msg = f"Unknown searcher config type: {type(config)}"
    raise ConfigurationError(msg)


def create_store(config: StoreConfig) -> EventStore:
    """Create an event store from config."""
    if isinstance(config, MemoryStoreConfig):
        return InMemoryEventStore(
            [EventRecord(event_id=e.event_id, query=e.query, title=e.title) for e in config.events]
        )
    if isinstance(config, SupabaseStoreConfig):
        return SupabaseEventStore.from_env(
            url_env=config.url_env,
            key_env=config.key_env,
            events_table=config.events_table,
            details_table=config.details_table,
            updates_table=config.updates_table,
        )
    msg = f"Unknown store config type: {type(config)}"
    raise ConfigurationError(msg)


def create_from_config(
    config: EventscopeConfig,
    *,
    log_override: bool | None = None,
    log_dir_override: str | None = None,
    client: anthropic.AsyncAnthropic | None = None,
    store: EventStore | None = None,
) -> Components:
    """Create every component from root config.

    One Anthropic client is shared by synthesis and update summarization.

    Args:
        config: Root configuration.
        log_override: Override the config's logging.enabled setting.
        log_dir_override: Override the config's logging.log_dir setting.
        client: Anthropic client to use instead of one built from env.
        store: Store to use instead of the configured one.

    Returns:
        The assembled components. ``run_logger`` is None if logging is disabled.

    Raises:
        ConfigurationError: If a required credential is missing.
    """
    log_enabled = log_override if log_override is not None else config.logging.enabled
    log_dir = Path(log_dir_override if log_dir_override is not None else config.logging.log_dir)

    run_logger: RunLogger | None = None
    if log_enabled:
        run_logger = RunLogger(log_dir=log_dir, enabled=True)

    llm_client = client if client is not None else create_client()
    event_store = store if store is not None else create_store(config.store)
    searcher = create_searcher(config.searcher)

    fetcher = ArticleFetcher(
        timeout_seconds=config.fetcher.timeout_seconds,
        max_chars=config.fetcher.max_chars,
        user_agent=config.fetcher.user_agent,
    )
    synthesizer = ClaudeSynthesizer(
        llm_client,
        model=config.synthesis.model,
        max_articles=config.synthesis.max_articles,
        max_snippets=config.synthesis.max_snippets,
        article_chars=config.synthesis.article_chars,
        temperature=config.synthesis.temperature,
        max_tokens=config.synthesis.max_tokens,
    )
    detector = UpdateDetector(
        searcher,
        llm_client,
        model=config.updates.model,
        temperature=config.updates.temperature,
        max_tokens=config.updates.max_tokens,
    )

    details_pipeline = DetailsPipeline(
        event_store,
        searcher,
        fetcher,
        synthesizer,
        max_fetch=config.filter.max_fetch,
        min_content_chars=config.pipeline.min_content_chars,
        denylist=config.filter.denylist,
        run_logger=run_logger,
    )
    update_pipeline = UpdatePipeline(event_store, detector, run_logger=run_logger)

    return Components(
        store=event_store,
        searcher=searcher,
        details_pipeline=details_pipeline,
        update_pipeline=update_pipeline,
        run_logger=run_logger,
    )
