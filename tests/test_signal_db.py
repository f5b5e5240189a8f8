"""
Tests for the append-only signal log.
"""

import sqlite3
from datetime import datetime, timedelta, timezone

from signal_monitor.models import SignalSource

from conftest import make_signal


def test_log_and_read_back(signal_db):
    signal = make_signal("t1", score=0.92)
    row_id = signal_db.log_signal(signal, "notified")

    records = signal_db.get_recent()
    assert len(records) == 1
    record = records[0]
    assert record.id == row_id
    assert record.source == "keyword"
    assert record.matched_value == "$PENGU"
    assert record.external_item_id == "t1"
    assert record.author_handle == "alice"
    assert record.score == 0.92
    assert record.action_taken == "notified"
    assert record.created_at == signal.created_at


def test_to_signal_rebuilds_signal(signal_db):
    signal = make_signal("t9")
    signal_db.log_signal(signal, "logged")

    rebuilt = signal_db.get_recent()[0].to_signal()
    assert rebuilt.source_tag == SignalSource.KEYWORD
    assert rebuilt.item.id == "t9"
    assert rebuilt.item.text == signal.item.text
    assert rebuilt.rationale == signal.rationale
    assert rebuilt.score == signal.score


def test_recent_is_most_recent_first_and_limited(signal_db):
    for i in range(5):
        signal_db.log_signal(make_signal(f"t{i}"), "notified")

    records = signal_db.get_recent(limit=3)
    assert [r.external_item_id for r in records] == ["t4", "t3", "t2"]
    assert signal_db.count() == 5


def test_prune_older_than(signal_db):
    signal_db.log_signal(make_signal("new"), "notified")
    old_time = (datetime.now(timezone.utc) - timedelta(days=120)).isoformat()
    with sqlite3.connect(signal_db.db_path) as conn:
        conn.execute("""
            INSERT INTO signals (source, tweet_id, created_at)
            VALUES ('keyword', 'old', ?)
        """, (old_time,))

    assert signal_db.count() == 2
    assert signal_db.prune_older_than(days=90) == 1
    assert [r.external_item_id for r in signal_db.get_recent()] == ["new"]
