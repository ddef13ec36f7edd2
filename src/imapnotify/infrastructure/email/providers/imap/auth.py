from __future__ import annotations

import ssl
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from imapclient import IMAPClient
from imapclient.exceptions import IMAPClientError, LoginError
from loguru import logger

from imapnotify.domain.errors import MailboxAuthError, MailboxConnectionError

DEFAULT_IMAP_PORT = 993
DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class ImapCredentials:
    """
    Represents credentials for a single IMAP mailbox.
    """
    host: str
    user: str
    password: str
    port: int = DEFAULT_IMAP_PORT

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"


class ImapAuthenticator:
    """
    Responsible ONLY for establishing an authenticated IMAPS session.
    No folder logic, no fetching, no parsing.
    """

    def __init__(self, creds: ImapCredentials, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self.creds = creds
        self.timeout = timeout

    def login(self) -> IMAPClient:
        """
        Returns an authenticated IMAPClient over TLS.

        The client addresses messages by sequence number and keeps
        INTERNALDATE values exactly as the server reports them, offset
        included.
        """
        logger.debug(f"Connecting to {self.creds.address}...")
        try:
            client = IMAPClient(
                host=self.creds.host,
                port=self.creds.port,
                ssl=True,
                ssl_context=ssl.create_default_context(),
                timeout=self.timeout,
                use_uid=False,
            )
        except (OSError, IMAPClientError) as e:
            raise MailboxConnectionError(f"Unable to connect to IMAP server: {e}") from e

        client.normalise_times = False
        logger.debug(f"Connected to {self.creds.address}")

        logger.debug(f"Logging in as {self.creds.user}...")
        try:
            client.login(self.creds.user, self.creds.password)
        except LoginError as e:
            _shutdown(client)
            raise MailboxAuthError(f"Unable to login to IMAP: {e}") from e
        except (OSError, IMAPClientError) as e:
            _shutdown(client)
            raise MailboxConnectionError(f"Unable to login to IMAP: {e}") from e

        logger.debug(f"Logged in as {self.creds.user}")
        return client

    @contextmanager
    def session(self) -> Iterator[IMAPClient]:
        """Authenticated session that is logged out on every exit path."""
        client = self.login()
        try:
            yield client
        finally:
            logout(client)


def logout(client: IMAPClient) -> None:
    logger.debug("Logging out...")
    try:
        client.logout()
    except (OSError, IMAPClientError) as e:
        logger.warning(f"Error closing client connection: {e}")
        return
    logger.debug("Logged out.")


def _shutdown(client: IMAPClient) -> None:
    try:
        client.shutdown()
    except OSError as e:
        logger.warning(f"Error closing client connection: {e}")
