"""
Tests for the persist-then-notify signal sink.
"""

import logging

import pytest

from signal_monitor.core.sink import SignalSink
from signal_monitor.errors import PersistenceError

from conftest import FakeNotifier, make_signal


class FailingSignalDB:
    def __init__(self):
        self.attempts = 0

    def log_signal(self, signal, action_taken):
        self.attempts += 1
        raise PersistenceError("disk full")


@pytest.mark.asyncio
async def test_persists_and_notifies_each_signal(signal_db):
    notifier = FakeNotifier()
    sink = SignalSink(signal_db, notifier=notifier)

    await sink.record([make_signal("t1"), make_signal("t2")])

    assert [s.item.id for s in notifier.sent] == ["t1", "t2"]
    records = signal_db.get_recent()
    assert len(records) == 2
    assert {r.action_taken for r in records} == {"notified"}


@pytest.mark.asyncio
async def test_notification_failure_keeps_record_and_continues(signal_db):
    notifier = FakeNotifier(fail_ids={"t1"})
    sink = SignalSink(signal_db, notifier=notifier)

    await sink.record([make_signal("t1"), make_signal("t2")])

    assert signal_db.count() == 2
    assert [s.item.id for s in notifier.sent] == ["t2"]


@pytest.mark.asyncio
async def test_persistence_failure_still_notifies():
    db = FailingSignalDB()
    notifier = FakeNotifier()
    sink = SignalSink(db, notifier=notifier)

    await sink.record([make_signal("t1"), make_signal("t2")])

    assert db.attempts == 2
    assert len(notifier.sent) == 2


@pytest.mark.asyncio
async def test_no_notifier_logs_single_warning(signal_db, caplog):
    sink = SignalSink(signal_db)

    with caplog.at_level(logging.WARNING, logger="signal_monitor.core.sink"):
        await sink.record([make_signal("t1"), make_signal("t2"), make_signal("t3")])

    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert {r.action_taken for r in signal_db.get_recent()} == {"logged"}


@pytest.mark.asyncio
async def test_dry_run_skips_notifier(signal_db):
    notifier = FakeNotifier()
    sink = SignalSink(signal_db, notifier=notifier, dry_run=True)

    await sink.record([make_signal("t1")])

    assert notifier.sent == []
    assert signal_db.get_recent()[0].action_taken == "dry_run"


@pytest.mark.asyncio
async def test_empty_batch_is_noop(signal_db):
    await SignalSink(signal_db).record([])
    assert signal_db.count() == 0
