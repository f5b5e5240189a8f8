"""
Watchlist Models
================

Monitoring targets held by the watchlist store.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class EntryKind(Enum):
    """What a watchlist entry matches against."""
    KEYWORD = "keyword"        # search query
    INFLUENCER = "influencer"  # account handle


@dataclass
class WatchlistEntry:
    """A keyword or account being monitored, with a trust weight."""
    id: int
    kind: EntryKind
    value: str
    weight: float = 1.0
    active: bool = True
    created_at: Optional[datetime] = None

    @property
    def display_value(self) -> str:
        if self.kind == EntryKind.INFLUENCER:
            return f"@{self.value}"
        return self.value
