"""
Signal Log Database

Append-only log of triggered signals. Rows are never updated or deleted by
the monitor; retention is handled outside the cycle (prune_older_than).
"""

import logging
import sqlite3
from datetime import datetime, timedelta, timezone
from typing import List

from ..models import Signal, SignalRecord
from .base import SQLiteDatabase

logger = logging.getLogger(__name__)

SIGNAL_LOG_RETENTION_DAYS = 90


class SignalDB(SQLiteDatabase):
    """SQLite store for the signal log."""

    def _init_schema(self, conn: sqlite3.Connection):
        conn.execute("""
            CREATE TABLE IF NOT EXISTS signals (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                source TEXT NOT NULL,
                matched_value TEXT,
                tweet_id TEXT,
                author_id TEXT,
                author TEXT,
                content TEXT,
                sentiment_score REAL,
                rationale TEXT,
                action_taken TEXT,
                item_created_at TEXT,
                created_at TEXT NOT NULL
            )
        """)
        conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_signals_created_at
            ON signals(created_at)
        """)

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> SignalRecord:
        return SignalRecord(
            id=row["id"],
            source=row["source"],
            matched_value=row["matched_value"] or "",
            external_item_id=row["tweet_id"] or "",
            author_id=row["author_id"] or "",
            author_handle=row["author"] or "",
            text=row["content"] or "",
            score=row["sentiment_score"] if row["sentiment_score"] is not None else 0.0,
            rationale=row["rationale"] or "",
            action_taken=row["action_taken"] or "",
            item_created_at=row["item_created_at"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def log_signal(self, signal: Signal, action_taken: str) -> int:
        """
        Append a signal to the log.

        Args:
            signal: The triggered signal
            action_taken: Free-text tag (e.g. "notified")

        Returns:
            Row id of the new record

        Raises:
            PersistenceError: The write failed
        """
        with self._get_connection() as conn:
            cursor = conn.execute("""
                INSERT INTO signals (
                    source, matched_value, tweet_id, author_id, author, content,
                    sentiment_score, rationale, action_taken, item_created_at, created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                signal.source_tag.value,
                signal.matched_value,
                signal.item.id,
                signal.item.author_id,
                signal.item.author_handle,
                signal.item.text,
                signal.score,
                signal.rationale,
                action_taken,
                signal.item.created_at,
                signal.created_at.isoformat(),
            ))
            return cursor.lastrowid

    def get_recent(self, limit: int = 10) -> List[SignalRecord]:
        """Most recent signals first."""
        with self._get_connection() as conn:
            rows = conn.execute("""
                SELECT * FROM signals
                ORDER BY created_at DESC, id DESC
                LIMIT ?
            """, (limit,)).fetchall()
        return [self._row_to_record(row) for row in rows]

    def count(self) -> int:
        with self._get_connection() as conn:
            return conn.execute("SELECT COUNT(*) AS cnt FROM signals").fetchone()["cnt"]

    def prune_older_than(self, days: int = SIGNAL_LOG_RETENTION_DAYS) -> int:
        """
        Remove signal records older than the retention window.

        Returns:
            Number of rows deleted
        """
        cutoff = (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()
        with self._get_connection() as conn:
            cursor = conn.execute("DELETE FROM signals WHERE created_at < ?", (cutoff,))
            deleted = cursor.rowcount

        if deleted:
            logger.info(f"Pruned {deleted} signal records older than {days} days")
        return deleted
