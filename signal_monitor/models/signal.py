"""
Signal Models
=============

Scoring results, triggered signals, and their persisted form.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from .content import ContentItem

# Neutral fallback used whenever scoring fails upstream
NEUTRAL_SCORE = 0.5
DEGRADED_RATIONALE = "Could not evaluate sentiment"


@dataclass(frozen=True)
class ScoreResult:
    """Bullishness score in [0, 1] plus the scorer's explanation."""
    score: float
    rationale: str
    degraded: bool = False

    @classmethod
    def neutral(cls) -> "ScoreResult":
        """The fixed fallback returned when an item could not be scored."""
        return cls(score=NEUTRAL_SCORE, rationale=DEGRADED_RATIONALE, degraded=True)


class SignalSource(Enum):
    """Which kind of watchlist entry produced a signal."""
    KEYWORD = "keyword"
    INFLUENCER = "influencer"


@dataclass(frozen=True)
class Signal:
    """A content item that crossed the bullishness threshold for a watchlist entry."""
    source_tag: SignalSource
    matched_value: str
    item: ContentItem
    score: float
    rationale: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class SignalRecord:
    """One row of the append-only signal log."""
    id: int
    source: str
    matched_value: str
    external_item_id: str
    author_id: str
    author_handle: str
    text: str
    score: float
    rationale: str
    action_taken: str
    item_created_at: Optional[str]
    created_at: datetime

    def to_signal(self) -> Signal:
        """Rebuild the Signal this row was written from."""
        return Signal(
            source_tag=SignalSource(self.source),
            matched_value=self.matched_value,
            item=ContentItem(
                id=self.external_item_id,
                text=self.text,
                author_id=self.author_id,
                author_handle=self.author_handle,
                created_at=self.item_created_at,
            ),
            score=self.score,
            rationale=self.rationale,
            created_at=self.created_at,
        )
