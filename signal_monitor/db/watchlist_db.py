"""
Watchlist Database

Stores the keywords and accounts the monitor scans. Entries are added and
removed by explicit operator commands; deactivated entries stay in the table
for audit but are excluded from cycles.
"""

import logging
import math
import sqlite3
from datetime import datetime, timezone
from typing import List, Optional, Union

from ..errors import ValidationError
from ..models import EntryKind, WatchlistEntry
from .base import SQLiteDatabase

logger = logging.getLogger(__name__)

# Inserted by seed_defaults() into an empty watchlist
DEFAULT_ENTRIES = [
    (EntryKind.KEYWORD, "$PENGU", 1.0),
    (EntryKind.KEYWORD, "penguin", 0.8),
    (EntryKind.KEYWORD, "memecoin", 0.5),
]


def _parse_kind(kind: Union[EntryKind, str]) -> EntryKind:
    if isinstance(kind, EntryKind):
        return kind
    try:
        return EntryKind(str(kind).strip().lower())
    except ValueError:
        valid = ", ".join(k.value for k in EntryKind)
        raise ValidationError(f"Unknown watchlist kind {kind!r} (expected one of: {valid})")


def _validate_weight(weight) -> float:
    try:
        weight = float(weight)
    except (TypeError, ValueError):
        raise ValidationError(f"Weight must be a number, got {weight!r}")
    if math.isnan(weight) or weight < 0:
        raise ValidationError(f"Weight must be >= 0, got {weight}")
    return weight


class WatchlistDB(SQLiteDatabase):
    """
    SQLite watchlist store.

    No uniqueness constraint on values: the same keyword can be added twice
    with different weights. Mutations made during a cycle are picked up by the
    next cycle's list_active() call.
    """

    def _init_schema(self, conn: sqlite3.Connection):
        conn.execute("""
            CREATE TABLE IF NOT EXISTS watchlist (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                type TEXT NOT NULL,
                value TEXT NOT NULL,
                weight REAL DEFAULT 1.0,
                active INTEGER DEFAULT 1,
                created_at TEXT NOT NULL
            )
        """)
        conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_watchlist_active
            ON watchlist(active)
        """)

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> WatchlistEntry:
        created_at = None
        if row["created_at"]:
            try:
                created_at = datetime.fromisoformat(row["created_at"])
            except ValueError:
                created_at = None

        return WatchlistEntry(
            id=row["id"],
            kind=EntryKind(row["type"]),
            value=row["value"],
            weight=row["weight"] if row["weight"] is not None else 1.0,
            active=bool(row["active"]),
            created_at=created_at,
        )

    @classmethod
    def _rows_to_entries(cls, rows) -> List[WatchlistEntry]:
        """Map rows to entries, skipping rows that do not describe a valid entry."""
        entries = []
        for row in rows:
            try:
                entries.append(cls._row_to_entry(row))
            except (ValueError, TypeError) as e:
                logger.warning(f"Skipping malformed watchlist row {row['id']}: {e}")
        return entries

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def list_active(self) -> List[WatchlistEntry]:
        """Active entries in insertion order."""
        with self._get_connection() as conn:
            rows = conn.execute(
                "SELECT * FROM watchlist WHERE active = 1 ORDER BY id ASC"
            ).fetchall()
        return self._rows_to_entries(rows)

    def list_all(self) -> List[WatchlistEntry]:
        """All entries, including deactivated ones."""
        with self._get_connection() as conn:
            rows = conn.execute("SELECT * FROM watchlist ORDER BY id ASC").fetchall()
        return self._rows_to_entries(rows)

    def get(self, entry_id: int) -> Optional[WatchlistEntry]:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM watchlist WHERE id = ?", (entry_id,)
            ).fetchone()
        return self._row_to_entry(row) if row else None

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add(
        self,
        kind: Union[EntryKind, str],
        value: str,
        weight: float = 1.0,
    ) -> WatchlistEntry:
        """
        Add a watchlist entry.

        Args:
            kind: EntryKind or its string value ("keyword" / "influencer")
            value: Search query or account handle (a leading @ is dropped)
            weight: Trust weight, >= 0 (default 1.0)

        Returns:
            The stored entry

        Raises:
            ValidationError: Unknown kind, empty value, or negative weight
        """
        kind = _parse_kind(kind)
        value = (value or "").strip()
        if kind == EntryKind.INFLUENCER:
            value = value.lstrip("@").strip()
        if not value:
            raise ValidationError("Watchlist value cannot be empty")
        weight = _validate_weight(weight)

        now = datetime.now(timezone.utc).isoformat()
        with self._get_connection() as conn:
            cursor = conn.execute("""
                INSERT INTO watchlist (type, value, weight, active, created_at)
                VALUES (?, ?, ?, 1, ?)
            """, (kind.value, value, weight, now))
            entry_id = cursor.lastrowid

        logger.info(f"Watchlist: added {kind.value} {value!r} (weight {weight}, id {entry_id})")
        return WatchlistEntry(
            id=entry_id,
            kind=kind,
            value=value,
            weight=weight,
            active=True,
            created_at=datetime.fromisoformat(now),
        )

    def remove(self, entry_id: int) -> bool:
        """
        Delete an entry.

        Returns:
            True if a row was deleted, False if the id did not exist
        """
        with self._get_connection() as conn:
            cursor = conn.execute("DELETE FROM watchlist WHERE id = ?", (entry_id,))
            removed = cursor.rowcount > 0

        if removed:
            logger.info(f"Watchlist: removed entry {entry_id}")
        return removed

    def set_active(self, entry_id: int, active: bool) -> bool:
        """Enable or disable an entry. Returns False if the id does not exist."""
        with self._get_connection() as conn:
            cursor = conn.execute(
                "UPDATE watchlist SET active = ? WHERE id = ?",
                (1 if active else 0, entry_id),
            )
            return cursor.rowcount > 0

    def set_weight(self, entry_id: int, weight: float) -> bool:
        """Change an entry's weight. Returns False if the id does not exist."""
        weight = _validate_weight(weight)
        with self._get_connection() as conn:
            cursor = conn.execute(
                "UPDATE watchlist SET weight = ? WHERE id = ?",
                (weight, entry_id),
            )
            return cursor.rowcount > 0

    def seed_defaults(self) -> int:
        """
        Insert the default keywords if the watchlist is empty.

        Returns:
            Number of entries inserted (0 if the table already had rows)
        """
        with self._get_connection() as conn:
            count = conn.execute("SELECT COUNT(*) AS cnt FROM watchlist").fetchone()["cnt"]
        if count > 0:
            return 0

        for kind, value, weight in DEFAULT_ENTRIES:
            self.add(kind, value, weight)
        return len(DEFAULT_ENTRIES)
