from __future__ import annotations

import psycopg
from psycopg.rows import dict_row
from loguru import logger

from imapnotify.domain.entities.message_record import IdentityKey, MessageRecord, PersistedRecord
from imapnotify.domain.errors import LedgerError, LedgerInsertError, LedgerQueryError

TABLE = "imap_notify"

SCHEMA_SQL = f"""
    CREATE TABLE IF NOT EXISTS {TABLE} (
        id SERIAL PRIMARY KEY,
        message_id TEXT NOT NULL,
        subject TEXT NOT NULL,
        from_addresses TEXT NOT NULL,
        internal_date TIMESTAMP WITH TIME ZONE NOT NULL,
        create_time TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP
    );

    CREATE INDEX IF NOT EXISTS idx_{TABLE}_identity ON {TABLE}(message_id, internal_date);
"""

SELECT_BY_KEY_SQL = f"""
    SELECT id, message_id, subject, from_addresses, internal_date, create_time
    FROM {TABLE}
    WHERE message_id = %s AND internal_date = %s
"""

INSERT_SQL = f"""
    INSERT INTO {TABLE}
    (message_id, subject, from_addresses, internal_date)
    VALUES (%s, %s, %s, %s)
    RETURNING id, message_id, subject, from_addresses, internal_date, create_time
"""


def _row_to_record(row: dict) -> PersistedRecord:
    return PersistedRecord(
        id=row["id"],
        message_id=row["message_id"],
        subject=row["subject"],
        from_addresses=row["from_addresses"],
        internal_date=row["internal_date"],
        create_time=row["create_time"],
    )


class PostgresLedger:
    """Seen-message ledger in a PostgreSQL table.

    (message_id, internal_date) is indexed but deliberately not unique:
    rows sharing a key are reported as ambiguous by the caller rather than
    rejected here.
    """

    def __init__(self, conn: psycopg.Connection) -> None:
        self.conn = conn

    def ensure_schema(self) -> None:
        try:
            with self.conn.cursor() as cur:
                cur.execute(SCHEMA_SQL)
        except psycopg.Error as e:
            raise LedgerError(f"Unable to create ledger table {TABLE}: {e}") from e
        logger.info(f"Ledger table {TABLE} ready")

    def find_by_key(self, key: IdentityKey) -> list[PersistedRecord]:
        try:
            with self.conn.cursor(row_factory=dict_row) as cur:
                cur.execute(SELECT_BY_KEY_SQL, (key.message_id, key.internal_date))
                rows = cur.fetchall()
        except psycopg.Error as e:
            raise LedgerQueryError(f"Unable to retrieve messages from database: {e}") from e
        return [_row_to_record(row) for row in rows]

    def insert(self, message: MessageRecord) -> PersistedRecord:
        try:
            with self.conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    INSERT_SQL,
                    (message.message_id, message.subject, message.from_addresses, message.internal_date),
                )
                row = cur.fetchone()
        except psycopg.Error as e:
            raise LedgerInsertError(f"Unable to insert message: {message.describe()}: {e}") from e
        if row is None:
            raise LedgerInsertError(f"Insert returned no row: {message.describe()}")
        return _row_to_record(row)
