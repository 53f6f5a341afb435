"""Data models for eventscope."""

from eventscope.data.models import (
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

__all__ = [
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
]
