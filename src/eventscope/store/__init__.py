"""Event record stores."""

from eventscope.store.base import EventStore
from eventscope.store.memory import InMemoryEventStore
from eventscope.store.supabase import SupabaseEventStore

__all__ = [
    "EventStore",
    "InMemoryEventStore",
    "SupabaseEventStore",
]
