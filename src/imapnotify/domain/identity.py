"""Identity resolution for deduplicating messages across runs."""

from __future__ import annotations

from enum import Enum

from imapnotify.domain.entities.message_record import IdentityKey, MessageRecord


class Outcome(str, Enum):
    """What happened to a single message during a run."""

    NEW = "new"
    SEEN_BEFORE = "seen_before"
    AMBIGUOUS = "ambiguous"
    MISSING_IDENTITY = "missing_identity"


def resolve_identity(message: MessageRecord) -> IdentityKey | None:
    """Return the ledger lookup key for a message.

    Message-IDs are not guaranteed unique, so the server's internal date is
    part of the key. This narrows collisions without eliminating them.

    Returns None when the message carries no Message-ID; such messages can
    never be matched against the ledger.
    """
    if not message.message_id:
        return None
    return IdentityKey(message.message_id, message.internal_date)
