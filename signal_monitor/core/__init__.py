from .decision import adjusted_threshold, should_trigger
from .dedup import DedupCache
from .monitor import CycleStats, SignalMonitor
from .sink import SignalSink

__all__ = [
    "adjusted_threshold",
    "should_trigger",
    "DedupCache",
    "CycleStats",
    "SignalMonitor",
    "SignalSink",
]
