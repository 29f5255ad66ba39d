"""SQLite storage for notification preferences."""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator, Iterable, List, Optional

from ..core.config import NotificationSettings
from .base import PreferenceStore
from .models import PreferenceRow

logger = logging.getLogger(__name__)


class SQLitePreferenceStore(PreferenceStore):
    """SQLite table keyed by (user_id, type, channel)."""

    def __init__(self, db_path: Optional[Path] = None, table: Optional[str] = None):
        """Initialize database connection settings and schema."""
        settings = NotificationSettings(preferences_table=table) if table else NotificationSettings()

        self.db_path = Path(db_path) if db_path else settings.resolved_database_path()
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.table = settings.preferences_table

        self._init_db()

    @classmethod
    def from_settings(cls, settings: NotificationSettings) -> "SQLitePreferenceStore":
        return cls(settings.resolved_database_path(), settings.preferences_table)

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a database connection with row factory."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_db(self):
        """Initialize database schema."""
        with self._get_connection() as conn:
            # Columns carry no type affinity so int and str identifiers round-trip unchanged
            conn.execute(f"""
                CREATE TABLE IF NOT EXISTS {self.table} (
                    user_id NOT NULL,
                    type NOT NULL,
                    channel NOT NULL,
                    is_active INTEGER NOT NULL DEFAULT 1,

                    PRIMARY KEY (user_id, type, channel)
                )
            """)

    def _row_to_preference(self, row: sqlite3.Row) -> PreferenceRow:
        return PreferenceRow(
            user_id=row["user_id"],
            type=row["type"],
            channel=row["channel"],
            is_active=bool(row["is_active"]),
        )

    def fetch(self, user_id: Any, type: Optional[Any] = None, channel: Optional[Any] = None) -> List[PreferenceRow]:
        """Read a user's rows, optionally filtered by type and/or channel."""
        query = f"SELECT * FROM {self.table} WHERE user_id = ?"
        params: List[Any] = [user_id]

        if type is not None:
            query += " AND type = ?"
            params.append(type)
        if channel is not None:
            query += " AND channel = ?"
            params.append(channel)

        with self._get_connection() as conn:
            cursor = conn.execute(query, params)
            return [self._row_to_preference(row) for row in cursor.fetchall()]

    def replace_all(self, user_id: Any, rows: Iterable[PreferenceRow]):
        """Delete every row of the user and insert ``rows`` in one transaction."""
        values = [(user_id, row.type, row.channel, int(bool(row.is_active))) for row in rows]

        with self._get_connection() as conn:
            # Take the write lock up front; readers keep seeing the committed rows
            conn.execute("BEGIN IMMEDIATE")
            conn.execute(f"DELETE FROM {self.table} WHERE user_id = ?", (user_id,))
            if values:
                conn.executemany(
                    f"INSERT INTO {self.table} (user_id, type, channel, is_active) VALUES (?, ?, ?, ?)",
                    values,
                )

        logger.info(f"Replaced notification preferences for user {user_id!r} ({len(values)} rows)")

    def delete_user(self, user_id: Any) -> int:
        """Remove all rows of a user."""
        with self._get_connection() as conn:
            cursor = conn.execute(f"DELETE FROM {self.table} WHERE user_id = ?", (user_id,))
            return cursor.rowcount

    def count(self) -> int:
        """Total stored rows."""
        with self._get_connection() as conn:
            return conn.execute(f"SELECT COUNT(*) FROM {self.table}").fetchone()[0]
