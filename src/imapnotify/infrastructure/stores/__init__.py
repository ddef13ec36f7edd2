from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Union

from imapnotify.infrastructure.postgres_client import postgres_session
from imapnotify.infrastructure.settings import Settings
from imapnotify.infrastructure.stores.postgres_ledger import PostgresLedger
from imapnotify.infrastructure.stores.sqlite_ledger import SQLiteLedger

LedgerStore = Union[PostgresLedger, SQLiteLedger]


@contextmanager
def open_ledger(settings: Settings, init_schema: bool = False) -> Iterator[LedgerStore]:
    """Open the configured ledger backend, releasing it on every exit path."""
    if settings.ledger_backend == "sqlite":
        ledger = SQLiteLedger(settings.sqlite_path)
        if init_schema:
            ledger.ensure_schema()
        yield ledger
        return

    with postgres_session(settings) as conn:
        ledger = PostgresLedger(conn)
        if init_schema:
            ledger.ensure_schema()
        yield ledger


__all__ = ["LedgerStore", "PostgresLedger", "SQLiteLedger", "open_ledger"]
