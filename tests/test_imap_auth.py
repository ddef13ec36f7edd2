from __future__ import annotations

import pytest
from imapclient.exceptions import IMAPClientError, LoginError

from imapnotify.domain.errors import MailboxAuthError, MailboxConnectionError
from imapnotify.infrastructure.email.providers.imap import auth
from imapnotify.infrastructure.email.providers.imap.auth import ImapAuthenticator, ImapCredentials

CREDS = ImapCredentials(host="imap.example.test", user="watcher@example.test", password="secret")


class StubIMAPClient:
    instances: list["StubIMAPClient"] = []
    login_error: Exception | None = None
    logout_error: Exception | None = None

    def __init__(self, host, port, *, ssl, ssl_context, timeout, use_uid) -> None:
        self.kwargs = {"host": host, "port": port, "ssl": ssl, "timeout": timeout, "use_uid": use_uid}
        self.normalise_times = True
        self.logins: list[tuple[str, str]] = []
        self.logged_out = False
        self.shut_down = False
        StubIMAPClient.instances.append(self)

    def login(self, user: str, password: str) -> None:
        if self.login_error is not None:
            raise self.login_error
        self.logins.append((user, password))

    def logout(self) -> None:
        if self.logout_error is not None:
            raise self.logout_error
        self.logged_out = True

    def shutdown(self) -> None:
        self.shut_down = True


@pytest.fixture
def stub_client(monkeypatch):
    StubIMAPClient.instances = []
    StubIMAPClient.login_error = None
    StubIMAPClient.logout_error = None
    monkeypatch.setattr(auth, "IMAPClient", StubIMAPClient)
    return StubIMAPClient


def test_login_opens_tls_session_by_sequence_number(stub_client) -> None:
    client = ImapAuthenticator(CREDS, timeout=12.5).login()

    assert client.kwargs == {
        "host": "imap.example.test",
        "port": 993,
        "ssl": True,
        "timeout": 12.5,
        "use_uid": False,
    }
    assert client.normalise_times is False
    assert client.logins == [("watcher@example.test", "secret")]


def test_connect_failure_is_a_connection_error(monkeypatch) -> None:
    def refuse(*_args, **_kwargs):
        raise ConnectionRefusedError("connection refused")

    monkeypatch.setattr(auth, "IMAPClient", refuse)

    with pytest.raises(MailboxConnectionError, match="Unable to connect to IMAP server"):
        ImapAuthenticator(CREDS).login()


def test_rejected_login_is_an_auth_error_and_closes_socket(stub_client) -> None:
    stub_client.login_error = LoginError("[AUTHENTICATIONFAILED] Invalid credentials")

    with pytest.raises(MailboxAuthError):
        ImapAuthenticator(CREDS).login()

    assert stub_client.instances[0].shut_down is True


def test_session_logs_out_even_when_the_body_fails(stub_client) -> None:
    with pytest.raises(RuntimeError):
        with ImapAuthenticator(CREDS).session():
            raise RuntimeError("boom")

    assert stub_client.instances[0].logged_out is True


def test_logout_errors_are_logged_not_raised(stub_client, log_records) -> None:
    stub_client.logout_error = IMAPClientError("BYE")

    with ImapAuthenticator(CREDS).session():
        pass

    assert any(level == "WARNING" and "Error closing client connection" in msg for level, msg in log_records)
