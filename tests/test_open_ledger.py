from __future__ import annotations

import psycopg
import pytest

from imapnotify.domain.errors import LedgerError
from imapnotify.infrastructure import postgres_client
from imapnotify.infrastructure.settings import Settings
from imapnotify.infrastructure.stores import PostgresLedger, SQLiteLedger, open_ledger

POSTGRES = {"db_user": "notify", "db_password": "secret", "db_name": "notify"}


class FakeConnection:
    def __init__(self) -> None:
        self.closed = False

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def connections(monkeypatch: pytest.MonkeyPatch) -> list[tuple[str, FakeConnection]]:
    opened: list[tuple[str, FakeConnection]] = []

    def connect(conninfo: str, autocommit: bool = False) -> FakeConnection:
        assert autocommit
        conn = FakeConnection()
        opened.append((conninfo, conn))
        return conn

    monkeypatch.setattr(postgres_client.psycopg, "connect", connect)
    return opened


def test_postgres_ledger_uses_the_configured_connection(connections) -> None:
    settings = Settings(_env_file=None, **POSTGRES)

    with open_ledger(settings) as ledger:
        assert isinstance(ledger, PostgresLedger)
        [(conninfo, conn)] = connections
        assert ledger.conn is conn
        assert conninfo == settings.postgres_dsn
        assert not conn.closed

    assert conn.closed


def test_postgres_connection_is_closed_when_the_run_fails(connections) -> None:
    with pytest.raises(RuntimeError, match="notifier exploded"):
        with open_ledger(Settings(_env_file=None, **POSTGRES)):
            raise RuntimeError("notifier exploded")

    [(_, conn)] = connections
    assert conn.closed


def test_postgres_connect_failure_is_a_ledger_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def refuse(conninfo: str, autocommit: bool = False) -> None:
        raise psycopg.OperationalError("connection refused")

    monkeypatch.setattr(postgres_client.psycopg, "connect", refuse)

    with pytest.raises(LedgerError, match="Failed to connect to database"):
        with open_ledger(Settings(_env_file=None, **POSTGRES)):
            pytest.fail("body must not run without a connection")


def test_sqlite_ledger_lets_run_failures_through(tmp_path) -> None:
    settings = Settings(_env_file=None, ledger_backend="sqlite", sqlite_path=str(tmp_path / "ledger.db"))

    with pytest.raises(RuntimeError, match="notifier exploded"):
        with open_ledger(settings, init_schema=True) as ledger:
            assert isinstance(ledger, SQLiteLedger)
            raise RuntimeError("notifier exploded")

    assert (tmp_path / "ledger.db").exists()
