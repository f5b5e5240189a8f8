"""
Content Models
==============

Dataclasses for posts fetched from the X API.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class EngagementMetrics:
    """Public engagement counters of a post."""
    likes: int = 0
    retweets: int = 0
    replies: int = 0


@dataclass
class ContentItem:
    """A post from the content source. Transient unless it becomes a Signal."""
    id: str  # unique within the content source
    text: str
    author_id: str
    author_handle: str
    created_at: Optional[str] = None  # ISO timestamp as returned by the API
    metrics: Optional[EngagementMetrics] = None

    @property
    def url(self) -> str:
        return f"https://x.com/{self.author_handle}/status/{self.id}"
