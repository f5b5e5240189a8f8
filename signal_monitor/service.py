"""
Monitor Service
===============

Invocation surface for the signal monitor: start/stop the scheduler, run a
scan on demand, and read back recent signals. from_config() wires the real
collaborators (SQLite stores, X API client, OpenAI scorer, Telegram).
"""

import asyncio
import dataclasses
import logging
import signal
import threading
from typing import List, Optional

from .alerts.telegram import TelegramAlerts
from .api.twitter import TwitterClient
from .config import Config, config as default_config
from .core.monitor import SignalMonitor
from .core.sink import SignalSink
from .db.signal_db import SignalDB
from .db.watchlist_db import WatchlistDB
from .errors import MonitorAlreadyRunning, SourceUnavailable
from .models import Signal, SignalRecord
from .sentiment.analyzer import SentimentAnalyzer

logger = logging.getLogger(__name__)

# Upper bound on waiting for the stop message at shutdown
STATUS_SEND_TIMEOUT_SEC = 15.0


class MonitorService:
    """
    Operator-facing facade over SignalMonitor.

    Telegram service-status messages are sent on start and stop when an
    alerts channel is configured.
    """

    def __init__(
        self,
        monitor: SignalMonitor,
        signal_db: SignalDB,
        alerts: Optional[TelegramAlerts] = None,
    ):
        self.monitor = monitor
        self.signal_db = signal_db
        self.alerts = alerts
        self._shutdown: Optional[asyncio.Event] = None
        self._status_thread: Optional[threading.Thread] = None

    @classmethod
    def from_config(
        cls,
        settings: Config = None,
        dry_run: bool = False,
        interval_ms: int = None,
        threshold: float = None,
    ) -> "MonitorService":
        """
        Build a service with the production collaborators.

        Args:
            settings: Config (default: global config)
            dry_run: Log signals instead of sending Telegram alerts
            interval_ms: Override of the cycle interval
            threshold: Override of the base threshold
        """
        settings = settings if settings is not None else default_config
        if threshold is not None:
            settings = dataclasses.replace(settings, base_threshold=threshold)

        watchlist_db = WatchlistDB(settings.db_path)
        signal_db = SignalDB(settings.db_path)
        alerts = TelegramAlerts.from_env(dry_run=dry_run)

        monitor = SignalMonitor(
            watchlist=watchlist_db,
            source=TwitterClient(
                base_url=settings.twitter_api_url,
                max_results=settings.twitter_max_results,
                max_retries=settings.max_retries,
                backoff_sec=settings.rate_limit_backoff_sec,
                request_timeout=settings.request_timeout_sec,
            ),
            scorer=SentimentAnalyzer(model=settings.openai_model),
            sink=SignalSink(signal_db, notifier=alerts, dry_run=dry_run),
            settings=settings,
            interval_ms=interval_ms,
        )
        return cls(monitor, signal_db, alerts=alerts)

    def _send_status(self, status: str, details: str = ""):
        if self.alerts is not None:
            self.alerts.send_service_status(status, details)

    def _send_status_in_background(self, status: str, details: str = ""):
        """Send a status message without blocking the caller (fire and forget)."""
        if self.alerts is None:
            return
        self._status_thread = threading.Thread(
            target=self._send_status, args=(status, details), daemon=True
        )
        self._status_thread.start()

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def start_monitor(self) -> bool:
        """
        Start the scheduler.

        Returns:
            True if started, False if already running or the content source
            has no read credentials
        """
        try:
            await self.monitor.start()
        except MonitorAlreadyRunning:
            logger.warning("Signal monitor already running")
            return False
        except SourceUnavailable as e:
            logger.error(f"Signal monitor disabled: {e}")
            await asyncio.to_thread(
                self._send_status, "disabled", "X API bearer token not configured"
            )
            return False

        await asyncio.to_thread(
            self._send_status,
            "started",
            f"Scanning every {self.monitor.interval_ms / 1000:.0f}s",
        )
        return True

    def stop_monitor(self) -> bool:
        """Stop the scheduler. Returns False if it was not running."""
        stopped = self.monitor.stop()
        if stopped:
            self._send_status_in_background("stopped")
        return stopped

    def is_monitor_running(self) -> bool:
        return self.monitor.is_running()

    async def manual_scan(self) -> List[Signal]:
        """
        Run one cycle now and return its signals.

        Raises:
            SourceUnavailable: The content source has no read credentials
        """
        return await self.monitor.run_cycle()

    def get_recent_signals(self, limit: int = 10) -> List[SignalRecord]:
        """Most recent signals first."""
        return self.signal_db.get_recent(limit)

    # -------------------------------------------------------------------------
    # Process lifecycle
    # -------------------------------------------------------------------------

    def _handle_shutdown(self):
        logger.info("Shutdown signal received, stopping monitor...")
        if self._shutdown is not None:
            self._shutdown.set()

    async def run_forever(self) -> bool:
        """
        Start the scheduler and block until SIGINT/SIGTERM.

        Returns:
            False if the scheduler could not be started
        """
        if not await self.start_monitor():
            return False

        self._shutdown = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, self._handle_shutdown)

        try:
            await self._shutdown.wait()
        finally:
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.remove_signal_handler(sig)
            self.stop_monitor()
            # Let an in-flight cycle finish before sessions are closed
            await self.monitor.wait_stopped()
            if self._status_thread is not None:
                await asyncio.to_thread(
                    self._status_thread.join, STATUS_SEND_TIMEOUT_SEC
                )
            await self.close()
        return True

    async def close(self):
        """Release HTTP sessions held by the collaborators."""
        for collaborator in (self.monitor.source, self.monitor.scorer):
            close = getattr(collaborator, "close", None)
            if close is not None:
                await close()
