"""Incremental update detection."""

from eventscope.updates.detector import UpdateDetector, parse_published_date, window_days

__all__ = [
    "UpdateDetector",
    "parse_published_date",
    "window_days",
]
