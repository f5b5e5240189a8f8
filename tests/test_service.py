"""
Tests for the MonitorService invocation surface.
"""

import asyncio
import threading

import pytest

from signal_monitor.config import Config
from signal_monitor.core.monitor import SignalMonitor
from signal_monitor.core.sink import SignalSink
from signal_monitor.service import MonitorService

from conftest import FakeNotifier, FakeScorer, FakeSource, make_item


class StatusRecorder:
    def __init__(self):
        self.statuses = []
        self.threads = []

    def send_service_status(self, status, details=""):
        self.statuses.append(status)
        self.threads.append(threading.current_thread())
        return True


class SlowStopRecorder(StatusRecorder):
    """Blocks the "stopped" send until released."""

    def __init__(self):
        super().__init__()
        self.release = threading.Event()

    def send_service_status(self, status, details=""):
        if status == "stopped":
            self.release.wait(timeout=2.0)
        return super().send_service_status(status, details)


def build_service(watchlist_db, signal_db, settings, readable=True, alerts=None):
    item = make_item("t1", text="$PENGU breakout")
    monitor = SignalMonitor(
        watchlist=watchlist_db,
        source=FakeSource(queries={"$PENGU": [item]}, readable=readable),
        scorer=FakeScorer(scores={item.text: 0.9}),
        sink=SignalSink(signal_db, notifier=FakeNotifier()),
        settings=settings,
        interval_ms=3_600_000,
    )
    return MonitorService(monitor, signal_db, alerts=alerts)


@pytest.mark.asyncio
async def test_manual_scan_and_recent_signals(watchlist_db, signal_db, settings):
    watchlist_db.add("keyword", "$PENGU")
    service = build_service(watchlist_db, signal_db, settings)

    signals = await service.manual_scan()

    assert [s.item.id for s in signals] == ["t1"]
    recent = service.get_recent_signals()
    assert [r.external_item_id for r in recent] == ["t1"]
    assert recent[0].action_taken == "notified"
    assert service.is_monitor_running() is False


@pytest.mark.asyncio
async def test_start_stop_lifecycle(watchlist_db, signal_db, settings):
    alerts = StatusRecorder()
    service = build_service(watchlist_db, signal_db, settings, alerts=alerts)

    assert await service.start_monitor() is True
    assert service.is_monitor_running() is True
    assert await service.start_monitor() is False

    assert service.stop_monitor() is True
    assert service.stop_monitor() is False
    await asyncio.wait_for(service.monitor.wait_stopped(), timeout=2.0)
    service._status_thread.join(timeout=2.0)

    assert alerts.statuses == ["started", "stopped"]


@pytest.mark.asyncio
async def test_start_without_credentials_reports_disabled(watchlist_db, signal_db, settings):
    alerts = StatusRecorder()
    service = build_service(watchlist_db, signal_db, settings, readable=False, alerts=alerts)

    assert await service.start_monitor() is False
    assert service.is_monitor_running() is False
    assert alerts.statuses == ["disabled"]


@pytest.mark.asyncio
async def test_stop_status_is_sent_off_the_event_loop(watchlist_db, signal_db, settings):
    alerts = SlowStopRecorder()
    service = build_service(watchlist_db, signal_db, settings, alerts=alerts)

    assert await service.start_monitor() is True

    # A slow Telegram send must not hold up stop_monitor()
    assert service.stop_monitor() is True
    assert alerts.statuses == ["started"]

    alerts.release.set()
    service._status_thread.join(timeout=2.0)
    await asyncio.wait_for(service.monitor.wait_stopped(), timeout=2.0)

    assert alerts.statuses == ["started", "stopped"]
    assert alerts.threads[1] is not threading.main_thread()


def test_from_config_passes_settings_to_twitter_client(tmp_path, monkeypatch):
    for name in ("TELEGRAM_BOT_TOKEN", "TELEGRAM_CHAT_ID", "OPENAI_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    settings = Config(
        data_dir=tmp_path,
        twitter_api_url="https://api.example.test/2",
        request_timeout_sec=4.0,
        rate_limit_backoff_sec=0.5,
        max_retries=7,
    )

    service = MonitorService.from_config(settings)

    source = service.monitor.source
    assert source.base_url == "https://api.example.test/2"
    assert source.request_timeout == 4.0
    assert source.backoff_sec == 0.5
    assert source.max_retries == 7
    assert service.monitor.settings is settings
