"""Exceptions raised by the notify pipeline.

Every error here is fatal for the current run. Recoverable conditions
(missing Message-ID, ambiguous ledger matches, undecodable headers) are
reported as outcomes or logged, never raised.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from imapnotify.domain.entities.message_record import MessageRecord


class ImapNotifyError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(ImapNotifyError):
    """Raised when required settings are missing or unreadable."""


class MailboxError(ImapNotifyError):
    """Base class for mailbox session failures."""


class MailboxConnectionError(MailboxError):
    """Raised when the IMAP server cannot be reached."""


class MailboxAuthError(MailboxError):
    """Raised when the IMAP server rejects the login."""


class FolderSelectError(MailboxError):
    """Raised when the folder cannot be opened read-only."""


class FetchStreamError(MailboxError):
    """Raised when the metadata fetch fails part way through.

    ``partial`` holds the records delivered before the failure. They are
    valid, but the fetch as a whole must be treated as failed.
    """

    def __init__(self, message: str, partial: Sequence[MessageRecord] = ()) -> None:
        super().__init__(message)
        self.partial = tuple(partial)


class LedgerError(ImapNotifyError):
    """Base class for ledger failures."""


class LedgerQueryError(LedgerError):
    """Raised when looking up an identity key fails."""


class LedgerInsertError(LedgerError):
    """Raised when recording a newly seen message fails."""


class NotificationError(ImapNotifyError):
    """Raised when an announcement cannot be written to its sink."""
