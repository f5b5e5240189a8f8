"""
Tests for the SQLite logging handler and service log queries.
"""

import logging

from signal_monitor.db.service_logs import ServiceLogDB, SQLiteLoggingHandler


def test_handler_persists_records(tmp_path):
    db_path = tmp_path / "logs.db"
    handler = SQLiteLoggingHandler(db_path=db_path, flush_interval=0.05)

    logger = logging.getLogger("signal_monitor.tests.sqlite_handler")
    logger.setLevel(logging.INFO)
    logger.addHandler(handler)
    try:
        logger.info("cycle complete")
        logger.debug("not captured")
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            logger.exception("cycle failed")
    finally:
        logger.removeHandler(handler)
        handler.close()

    logs = ServiceLogDB(db_path).get_logs(hours=1)
    messages = {log["message"] for log in logs}
    assert messages == {"cycle complete", "cycle failed"}

    errors = ServiceLogDB(db_path).get_logs(hours=1, level="ERROR")
    assert len(errors) == 1
    assert "RuntimeError: boom" in errors[0]["exc_info"]


def test_prune_logs(tmp_path):
    db = ServiceLogDB(tmp_path / "logs.db")
    db.write_logs_batch([
        {"timestamp": "2020-01-01T00:00:00+00:00", "level": "INFO",
         "logger_name": "x", "message": "old"},
    ])
    assert db.prune_logs(days=7) == 1
    assert db.get_logs(hours=24 * 365 * 20) == []
