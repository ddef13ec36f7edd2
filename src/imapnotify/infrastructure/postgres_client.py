"""PostgreSQL client for the seen-message ledger."""

from contextlib import contextmanager
from typing import Iterator

import psycopg
from loguru import logger

from imapnotify.domain.errors import LedgerError
from imapnotify.infrastructure.settings import Settings


class PostgresClientWrapper:
    """Owns the PostgreSQL connection used by the ledger."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self._connection: psycopg.Connection | None = None

    def connect(self) -> psycopg.Connection:
        """Establish connection to PostgreSQL.

        Autocommit is on: every insert is its own transaction, so a failure
        later in the run never rolls back messages already recorded.
        """
        if self._connection is None or self._connection.closed:
            logger.debug(f"Connecting to PostgreSQL at {self.settings.db_host}:{self.settings.db_port}")
            try:
                self._connection = psycopg.connect(self.settings.postgres_dsn, autocommit=True)
            except psycopg.Error as e:
                raise LedgerError(f"Failed to connect to database: {e}") from e
            logger.debug("PostgreSQL connection established")
        return self._connection

    def disconnect(self) -> None:
        """Close PostgreSQL connection."""
        if self._connection is not None and not self._connection.closed:
            try:
                self._connection.close()
            except psycopg.Error as e:
                logger.warning(f"Error closing database connection: {e}")
            self._connection = None
            logger.debug("PostgreSQL connection closed")


@contextmanager
def postgres_session(settings: Settings) -> Iterator[psycopg.Connection]:
    """Context manager for PostgreSQL connection lifecycle."""
    client = PostgresClientWrapper(settings)
    conn = client.connect()
    try:
        yield conn
    finally:
        client.disconnect()
