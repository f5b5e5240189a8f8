"""
Signal Monitor

Periodic scan loop that:
1. Reads the active watchlist
2. Fetches recent posts for each keyword, then each influencer
3. Skips posts already processed in this process lifetime
4. Scores new posts and applies the weighted threshold
5. Hands the cycle's signals to the sink (persist + notify)
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Protocol

from ..config import Config, config as default_config
from ..errors import (
    MonitorAlreadyRunning,
    NotFoundError,
    PersistenceError,
    SourceError,
    SourceUnavailable,
)
from ..models import (
    ContentItem,
    EntryKind,
    ScoreResult,
    Signal,
    SignalSource,
    WatchlistEntry,
)
from .decision import adjusted_threshold, should_trigger
from .dedup import DedupCache

logger = logging.getLogger(__name__)


class WatchlistSource(Protocol):
    def list_active(self) -> List[WatchlistEntry]: ...


class ContentSource(Protocol):
    def can_read(self) -> bool: ...
    async def search_by_query(self, query: str, limit: int) -> List[ContentItem]: ...
    async def list_by_account(self, handle: str, limit: int) -> List[ContentItem]: ...


class Scorer(Protocol):
    async def score(self, text: str, subject_hint: Optional[str] = None) -> ScoreResult: ...


class Sink(Protocol):
    async def record(self, signals: List[Signal]): ...


@dataclass
class CycleStats:
    """Counters for one cycle."""
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    entries_scanned: int = 0
    entry_failures: int = 0
    items_fetched: int = 0
    items_new: int = 0
    items_skipped: int = 0
    scoring_fallbacks: int = 0
    signals: int = 0
    evicted: int = 0
    duration_sec: float = 0.0


class SignalMonitor:
    """
    Watchlist-driven signal detection scheduler.

    States: Idle -> Running -> Idle, plus the enabled flag set by start()
    and cleared by stop(). At most one cycle body runs at a time: timer
    ticks that find a cycle in progress are skipped, on-demand run_cycle()
    calls wait their turn.

    Entries are processed sequentially. A failure on one entry or one item
    is logged and never aborts the cycle.
    """

    def __init__(
        self,
        watchlist: WatchlistSource,
        source: ContentSource,
        scorer: Scorer,
        sink: Sink,
        dedup: DedupCache = None,
        settings: Config = None,
        interval_ms: int = None,
    ):
        """
        Initialize the monitor.

        Args:
            watchlist: Store providing list_active()
            source: Content source client
            scorer: Bullishness scorer
            sink: Signal sink (persist + notify)
            dedup: Dedup cache (default sized from settings)
            settings: Config (default: global config)
            interval_ms: Override of settings.cycle_interval_ms
        """
        self.settings = settings if settings is not None else default_config
        self.watchlist = watchlist
        self.source = source
        self.scorer = scorer
        self.sink = sink
        self.dedup = dedup if dedup is not None else DedupCache(
            max_size=self.settings.dedup_max_size,
            trim_to=self.settings.dedup_trim_to,
        )
        self.interval_ms = (
            interval_ms if interval_ms is not None else self.settings.cycle_interval_ms
        )
        if self.interval_ms <= 0:
            raise ValueError("interval_ms must be positive")

        self.last_cycle_stats: Optional[CycleStats] = None

        self._enabled = False
        self._cycle_lock = asyncio.Lock()
        self._stop_event: Optional[asyncio.Event] = None
        self._timer_task: Optional[asyncio.Task] = None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def is_running(self) -> bool:
        """True while the scheduler is enabled (between start and stop)."""
        return self._enabled

    def is_cycle_in_progress(self) -> bool:
        return self._cycle_lock.locked()

    async def start(self):
        """
        Enable the scheduler: run one cycle now, then every interval.

        Raises:
            MonitorAlreadyRunning: Already enabled (state is left untouched)
            SourceUnavailable: The content source cannot read
        """
        if self._enabled:
            raise MonitorAlreadyRunning("Signal monitor is already running")
        if not self.source.can_read():
            raise SourceUnavailable("Content source has no read credentials")

        self._enabled = True
        self._stop_event = asyncio.Event()
        self._timer_task = asyncio.create_task(
            self._timer_loop(self._stop_event), name="signal-monitor-timer"
        )
        logger.info(f"Signal monitor started (interval {self.interval_ms / 1000:.0f}s)")

    def stop(self) -> bool:
        """
        Disable the scheduler. An in-flight cycle runs to completion.

        Returns:
            False if the scheduler was not running
        """
        if not self._enabled:
            return False

        self._enabled = False
        if self._stop_event is not None:
            self._stop_event.set()
        logger.info("Signal monitor stopped")
        return True

    async def wait_stopped(self):
        """Wait for the timer task (and any cycle it is running) to finish."""
        if self._timer_task is not None:
            await self._timer_task

    async def _timer_loop(self, stop_event: asyncio.Event):
        # The first cycle waits for an in-flight one instead of being skipped
        await self._tick(wait=True)
        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.interval_ms / 1000)
            except asyncio.TimeoutError:
                await self._tick()

    async def _tick(self, wait: bool = False):
        if not wait and self._cycle_lock.locked():
            logger.info("Previous cycle still running, skipping tick")
            return

        try:
            await self.run_cycle()
        except SourceUnavailable as e:
            logger.error(f"Cycle not run: {e}")
        except Exception as e:
            logger.exception(f"Unexpected error in cycle: {e}")

    # -------------------------------------------------------------------------
    # Cycle
    # -------------------------------------------------------------------------

    async def run_cycle(self) -> List[Signal]:
        """
        Run one full pass over the active watchlist.

        Callable on demand whether or not the scheduler is enabled.

        Returns:
            Signals produced by this cycle

        Raises:
            SourceUnavailable: The content source cannot read
        """
        if not self.source.can_read():
            raise SourceUnavailable("Content source has no read credentials")

        async with self._cycle_lock:
            return await self._run_cycle_locked()

    async def _run_cycle_locked(self) -> List[Signal]:
        stats = CycleStats()
        start = time.monotonic()
        signals: List[Signal] = []

        try:
            try:
                entries = self.watchlist.list_active()
            except PersistenceError as e:
                logger.error(f"Could not read watchlist: {e}")
                return signals
            except Exception as e:
                logger.exception(f"Unexpected error reading watchlist: {e}")
                return signals

            keywords = [e for e in entries if e.kind == EntryKind.KEYWORD]
            influencers = [e for e in entries if e.kind == EntryKind.INFLUENCER]

            for entry in keywords:
                signals.extend(await self._process_entry(entry, SignalSource.KEYWORD, stats))
            for entry in influencers:
                signals.extend(await self._process_entry(entry, SignalSource.INFLUENCER, stats))

            if signals:
                try:
                    await self.sink.record(signals)
                except Exception as e:
                    logger.exception(f"Signal sink failed: {e}")

            return signals

        finally:
            stats.evicted = self.dedup.evict_if_needed()
            stats.signals = len(signals)
            stats.duration_sec = time.monotonic() - start
            self.last_cycle_stats = stats
            self._log_summary(stats)

    async def _fetch(self, entry: WatchlistEntry, source_tag: SignalSource) -> List[ContentItem]:
        if source_tag == SignalSource.KEYWORD:
            return await self.source.search_by_query(
                entry.value, self.settings.keyword_search_limit
            )
        return await self.source.list_by_account(
            entry.value, self.settings.influencer_tweet_limit
        )

    async def _process_entry(
        self,
        entry: WatchlistEntry,
        source_tag: SignalSource,
        stats: CycleStats,
    ) -> List[Signal]:
        """Fetch, score and decide for one watchlist entry."""
        stats.entries_scanned += 1

        try:
            items = await self._fetch(entry, source_tag)
        except (SourceError, NotFoundError) as e:
            stats.entry_failures += 1
            logger.warning(f"Fetch failed for {source_tag.value} {entry.display_value}: {e}")
            return []
        except Exception as e:
            stats.entry_failures += 1
            logger.exception(
                f"Unexpected error fetching {source_tag.value} {entry.display_value}: {e}"
            )
            return []

        stats.items_fetched += len(items)
        hint = entry.value if source_tag == SignalSource.KEYWORD else None
        threshold = adjusted_threshold(entry.weight, self.settings.base_threshold)

        signals = []
        for item in items:
            if self.dedup.seen(item.id):
                stats.items_skipped += 1
                continue
            self.dedup.mark_seen(item.id)
            stats.items_new += 1

            result = await self._score(item, hint)
            if result.degraded:
                stats.scoring_fallbacks += 1

            if should_trigger(result.score, entry.weight, self.settings.base_threshold):
                logger.info(
                    f"Signal: {source_tag.value} {entry.display_value} post {item.id} "
                    f"by @{item.author_handle} score {result.score:.2f} >= {threshold:.2f}"
                )
                signals.append(Signal(
                    source_tag=source_tag,
                    matched_value=entry.value,
                    item=item,
                    score=result.score,
                    rationale=result.rationale,
                ))
            else:
                logger.debug(
                    f"Post {item.id} score {result.score:.2f} below {threshold:.2f}"
                )

        return signals

    async def _score(self, item: ContentItem, hint: Optional[str]) -> ScoreResult:
        try:
            return await self.scorer.score(item.text, hint)
        except Exception as e:
            logger.warning(f"Scoring failed for post {item.id}: {e}")
            return ScoreResult.neutral()

    def _log_summary(self, stats: CycleStats):
        logger.info("=" * 60)
        logger.info(
            f"CYCLE COMPLETE - {stats.signals} signal(s) in {stats.duration_sec:.1f}s"
        )
        logger.info(
            f"  Entries: {stats.entries_scanned} scanned, {stats.entry_failures} failed"
        )
        logger.info(
            f"  Posts: {stats.items_fetched} fetched, {stats.items_new} new, "
            f"{stats.items_skipped} already seen"
        )
        if stats.scoring_fallbacks:
            logger.info(f"  Scoring fallbacks: {stats.scoring_fallbacks}")
        if stats.evicted:
            logger.info(f"  Dedup cache trimmed: {stats.evicted} ids evicted")
        logger.info("=" * 60)
