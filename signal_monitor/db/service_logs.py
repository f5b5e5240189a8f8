"""
Persistent Service Logs
=======================

Log records persisted to the service_logs table so they survive restarts
and can be queried with scripts/view_logs.py.
"""

import logging
import sqlite3
import sys
import threading
import traceback
from datetime import datetime, timedelta, timezone
from pathlib import Path
from queue import Empty, Queue
from typing import List, Optional

from .base import SQLiteDatabase

SERVICE_LOG_RETENTION_DAYS = 7

_INSERT_LOG_SQL = """
    INSERT INTO service_logs (timestamp, level, logger_name, message, exc_info)
    VALUES (?, ?, ?, ?, ?)
"""


class ServiceLogDB(SQLiteDatabase):
    """Read/prune access to persisted service logs."""

    def _init_schema(self, conn: sqlite3.Connection):
        conn.execute("""
            CREATE TABLE IF NOT EXISTS service_logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp TEXT NOT NULL,
                level TEXT NOT NULL,
                logger_name TEXT NOT NULL,
                message TEXT NOT NULL,
                exc_info TEXT
            )
        """)
        conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_service_logs_time
            ON service_logs(timestamp)
        """)
        conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_service_logs_level
            ON service_logs(level)
        """)

    def write_logs_batch(self, logs: List[dict]):
        """Write multiple log entries in one transaction."""
        with self._get_connection() as conn:
            conn.executemany(_INSERT_LOG_SQL, [
                (log['timestamp'], log['level'], log['logger_name'],
                 log['message'], log.get('exc_info'))
                for log in logs
            ])

    def get_logs(
        self,
        hours: int = 24,
        level: Optional[str] = None,
        limit: int = 1000
    ) -> List[dict]:
        """
        Get recent logs from the database.

        Args:
            hours: How many hours of logs to fetch
            level: Filter by log level (optional)
            limit: Maximum number of logs to return

        Returns:
            List of log records (newest first)
        """
        cutoff = (datetime.now(timezone.utc) - timedelta(hours=hours)).isoformat()

        with self._get_connection() as conn:
            if level:
                cursor = conn.execute("""
                    SELECT * FROM service_logs
                    WHERE timestamp > ? AND level = ?
                    ORDER BY timestamp DESC
                    LIMIT ?
                """, (cutoff, level, limit))
            else:
                cursor = conn.execute("""
                    SELECT * FROM service_logs
                    WHERE timestamp > ?
                    ORDER BY timestamp DESC
                    LIMIT ?
                """, (cutoff, limit))

            return [dict(row) for row in cursor.fetchall()]

    def prune_logs(self, days: int = SERVICE_LOG_RETENTION_DAYS) -> int:
        """
        Remove old log entries.

        Returns:
            Number of rows deleted
        """
        cutoff = (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()

        with self._get_connection() as conn:
            cursor = conn.execute(
                "DELETE FROM service_logs WHERE timestamp < ?", (cutoff,)
            )
            return cursor.rowcount


class SQLiteLoggingHandler(logging.Handler):
    """
    A logging handler that writes log records to SQLite.

    Uses a background thread to batch writes so emitting a record never
    blocks on disk I/O.
    """

    def __init__(
        self,
        db_path: Path = None,
        batch_size: int = 50,
        flush_interval: float = 5.0,
        level: int = logging.INFO
    ):
        """
        Args:
            db_path: Path to SQLite database file
            batch_size: Number of logs to batch before writing
            flush_interval: Max seconds between flushes
            level: Minimum log level to capture
        """
        super().__init__(level)
        self.batch_size = batch_size
        self.flush_interval = flush_interval
        self._db = ServiceLogDB(db_path)

        self._queue: Queue = Queue()
        self._shutdown = threading.Event()

        self._writer_thread = threading.Thread(
            target=self._writer_loop,
            daemon=True,
            name="SQLiteLogWriter"
        )
        self._writer_thread.start()

    @property
    def db_path(self) -> Path:
        return self._db.db_path

    def emit(self, record: logging.LogRecord):
        try:
            exc_info = None
            if record.exc_info:
                exc_info = ''.join(traceback.format_exception(*record.exc_info))

            self._queue.put({
                'timestamp': datetime.now(timezone.utc).isoformat(),
                'level': record.levelname,
                'logger_name': record.name,
                'message': record.getMessage(),
                'exc_info': exc_info,
            })
        except Exception:
            self.handleError(record)

    def _drain(self, batch: List[dict]) -> List[dict]:
        while len(batch) < self.batch_size:
            try:
                batch.append(self._queue.get(timeout=self.flush_interval))
            except Empty:
                break
        return batch

    def _writer_loop(self):
        """Background loop that batches and writes logs to SQLite."""
        while not self._shutdown.is_set():
            batch = self._drain([])
            if batch:
                self._write_batch(batch)

        # Final flush on shutdown
        remaining = []
        while True:
            try:
                remaining.append(self._queue.get_nowait())
            except Empty:
                break
        if remaining:
            self._write_batch(remaining)

    def _write_batch(self, batch: List[dict]):
        # Writer errors go to stderr; logging them would recurse into this handler
        try:
            self._db.write_logs_batch(batch)
        except Exception:
            traceback.print_exc(file=sys.stderr)

    def close(self):
        """Stop the writer thread and flush remaining logs."""
        self._shutdown.set()
        if self._writer_thread.is_alive():
            self._writer_thread.join(timeout=self.flush_interval + 5)
        super().close()
