"""SQLite ledger for running without a PostgreSQL server."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator

from loguru import logger

from imapnotify.domain.entities.message_record import IdentityKey, MessageRecord, PersistedRecord
from imapnotify.domain.errors import LedgerError, LedgerInsertError, LedgerQueryError

TABLE = "imap_notify"


def _row_to_record(row: sqlite3.Row) -> PersistedRecord:
    return PersistedRecord(
        id=row["id"],
        message_id=row["message_id"],
        subject=row["subject"],
        from_addresses=row["from_addresses"],
        internal_date=datetime.fromisoformat(row["internal_date"]),
        create_time=datetime.fromisoformat(row["create_time"]),
    )


class SQLiteLedger:
    """Seen-message ledger in a single SQLite file.

    Timestamps are stored as ISO-8601 text, so identity lookups compare the
    exact text the server's date produced, offset included.
    """

    def __init__(self, db_path: str | Path = "imap_notify.db"):
        self.db_path = Path(db_path)

    def ensure_schema(self) -> None:
        """Create database and table if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            with self._connection() as conn:
                conn.executescript(f"""
                    CREATE TABLE IF NOT EXISTS {TABLE} (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        message_id TEXT NOT NULL,
                        subject TEXT NOT NULL,
                        from_addresses TEXT NOT NULL,
                        internal_date TEXT NOT NULL,
                        create_time TEXT NOT NULL
                    );

                    CREATE INDEX IF NOT EXISTS idx_{TABLE}_identity
                        ON {TABLE}(message_id, internal_date);
                """)
        except sqlite3.Error as e:
            raise LedgerError(f"Unable to create ledger table {TABLE}: {e}") from e
        logger.info(f"SQLite ledger initialized at {self.db_path}")

    @contextmanager
    def _connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Context manager for database connections."""
        try:
            conn = sqlite3.connect(self.db_path, timeout=30.0)
        except sqlite3.Error as e:
            raise LedgerError(f"Failed to open SQLite ledger {self.db_path}: {e}") from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def find_by_key(self, key: IdentityKey) -> list[PersistedRecord]:
        try:
            with self._connection() as conn:
                rows = conn.execute(
                    f"""SELECT id, message_id, subject, from_addresses, internal_date, create_time
                        FROM {TABLE}
                        WHERE message_id = ? AND internal_date = ?""",
                    (key.message_id, key.internal_date.isoformat()),
                ).fetchall()
        except sqlite3.Error as e:
            raise LedgerQueryError(f"Unable to retrieve messages from database: {e}") from e
        return [_row_to_record(row) for row in rows]

    def insert(self, message: MessageRecord) -> PersistedRecord:
        create_time = datetime.now(timezone.utc)
        try:
            with self._connection() as conn:
                cursor = conn.execute(
                    f"""INSERT INTO {TABLE}
                        (message_id, subject, from_addresses, internal_date, create_time)
                        VALUES (?, ?, ?, ?, ?)""",
                    (
                        message.message_id,
                        message.subject,
                        message.from_addresses,
                        message.internal_date.isoformat(),
                        create_time.isoformat(),
                    ),
                )
                row_id = cursor.lastrowid
        except sqlite3.Error as e:
            raise LedgerInsertError(f"Unable to insert message: {message.describe()}: {e}") from e

        return PersistedRecord(
            id=row_id,
            message_id=message.message_id,
            subject=message.subject,
            from_addresses=message.from_addresses,
            internal_date=message.internal_date,
            create_time=create_time,
        )
