"""
SQLite Base
===========

Shared connection handling for the SQLite stores.
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path

from ..config import config
from ..errors import PersistenceError


class SQLiteDatabase:
    """
    Base class for the SQLite stores.

    Designed for minimal overhead:
    - WAL mode for concurrent reads
    - One short-lived connection per operation
    - sqlite3 errors surface as PersistenceError
    """

    def __init__(self, db_path: Path = None):
        self.db_path = Path(db_path) if db_path else config.db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._get_connection() as conn:
            conn.execute("PRAGMA journal_mode=WAL")
            self._init_schema(conn)

    def _init_schema(self, conn: sqlite3.Connection):
        """Create tables and indexes. Overridden by each store."""
        raise NotImplementedError

    @contextmanager
    def _get_connection(self):
        """Get a database connection with proper cleanup."""
        try:
            conn = sqlite3.connect(str(self.db_path), timeout=30)
        except sqlite3.Error as e:
            raise PersistenceError(f"Cannot open {self.db_path}: {e}") from e

        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise PersistenceError(str(e)) from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
