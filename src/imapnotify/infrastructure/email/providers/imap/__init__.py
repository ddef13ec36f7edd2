"""IMAP mailbox access: session bootstrap, envelope mapping and the folder reader."""

from imapnotify.infrastructure.email.providers.imap.auth import (
    ImapAuthenticator,
    ImapCredentials,
)
from imapnotify.infrastructure.email.providers.imap.client import ImapMailboxReader

__all__ = [
    "ImapAuthenticator",
    "ImapCredentials",
    "ImapMailboxReader",
]
