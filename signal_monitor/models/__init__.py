"""
Shared Data Models
==================

This package contains dataclasses used across the project.
"""

from .content import ContentItem, EngagementMetrics
from .signal import (
    DEGRADED_RATIONALE,
    NEUTRAL_SCORE,
    ScoreResult,
    Signal,
    SignalRecord,
    SignalSource,
)
from .watchlist import EntryKind, WatchlistEntry

__all__ = [
    "ContentItem",
    "EngagementMetrics",
    "ScoreResult",
    "Signal",
    "SignalRecord",
    "SignalSource",
    "NEUTRAL_SCORE",
    "DEGRADED_RATIONALE",
    "EntryKind",
    "WatchlistEntry",
]
