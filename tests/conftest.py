"""
Shared fixtures and in-test fakes for the signal monitor tests.
"""

import sys
from pathlib import Path
from typing import Dict, List, Optional

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from signal_monitor.config import Config
from signal_monitor.db.signal_db import SignalDB
from signal_monitor.db.watchlist_db import WatchlistDB
from signal_monitor.errors import NotificationError
from signal_monitor.models import ContentItem, ScoreResult, Signal, SignalSource


def make_item(item_id: str, text: str = "gm", handle: str = "alice", author_id: str = "42") -> ContentItem:
    return ContentItem(
        id=item_id,
        text=text,
        author_id=author_id,
        author_handle=handle,
        created_at="2026-01-01T00:00:00.000Z",
    )


def make_signal(item_id: str = "t1", score: float = 0.9, value: str = "$PENGU") -> Signal:
    return Signal(
        source_tag=SignalSource.KEYWORD,
        matched_value=value,
        item=make_item(item_id, text=f"{value} looking strong"),
        score=score,
        rationale="Strong buy language",
    )


class FakeWatchlist:
    """list_active() from a plain list, or raise a configured error."""

    def __init__(self, entries=None, error: Exception = None):
        self.entries = list(entries or [])
        self.error = error

    def list_active(self):
        if self.error:
            raise self.error
        return [e for e in self.entries if e.active]


class FakeSource:
    """
    Content source returning canned items.

    Values in `queries` / `accounts` are either a list of items or an
    exception instance to raise.
    """

    def __init__(self, queries: Dict = None, accounts: Dict = None, readable: bool = True):
        self.queries = queries or {}
        self.accounts = accounts or {}
        self.readable = readable
        self.calls: List[tuple] = []

    def can_read(self) -> bool:
        return self.readable

    async def search_by_query(self, query: str, limit: int):
        self.calls.append(("search", query, limit))
        result = self.queries.get(query, [])
        if isinstance(result, Exception):
            raise result
        return list(result)[:limit]

    async def list_by_account(self, handle: str, limit: int):
        self.calls.append(("account", handle, limit))
        result = self.accounts.get(handle, [])
        if isinstance(result, Exception):
            raise result
        return list(result)[:limit]


class FakeScorer:
    """Scores by item text; unknown text gets `default`."""

    def __init__(self, scores: Dict[str, float] = None, default: float = 0.1, error: Exception = None):
        self.scores = scores or {}
        self.default = default
        self.error = error
        self.calls: List[tuple] = []

    async def score(self, text: str, subject_hint: Optional[str] = None) -> ScoreResult:
        self.calls.append((text, subject_hint))
        if self.error:
            raise self.error
        return ScoreResult(score=self.scores.get(text, self.default), rationale="fake")


class FakeNotifier:
    def __init__(self, fail_ids=()):
        self.fail_ids = set(fail_ids)
        self.sent: List[Signal] = []

    def send_signal_alert(self, signal: Signal):
        if signal.item.id in self.fail_ids:
            raise NotificationError("delivery failed")
        self.sent.append(signal)
        return 1


class RecordingSink:
    def __init__(self):
        self.batches: List[List[Signal]] = []

    async def record(self, signals):
        self.batches.append(list(signals))


@pytest.fixture
def settings(tmp_path):
    return Config(data_dir=tmp_path)


@pytest.fixture
def watchlist_db(tmp_path):
    return WatchlistDB(tmp_path / "signals.db")


@pytest.fixture
def signal_db(tmp_path):
    return SignalDB(tmp_path / "signals.db")
