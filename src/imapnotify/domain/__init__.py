"""Domain models and entities."""

from imapnotify.domain.entities.message_record import (
    IdentityKey,
    MessageRecord,
    PersistedRecord,
)
from imapnotify.domain.identity import Outcome, resolve_identity

__all__ = [
    "IdentityKey",
    "MessageRecord",
    "PersistedRecord",
    "Outcome",
    "resolve_identity",
]
