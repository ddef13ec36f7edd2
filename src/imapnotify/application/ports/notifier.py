from __future__ import annotations
from typing import Protocol
from imapnotify.domain.entities.message_record import MessageRecord, PersistedRecord

class Notifier(Protocol):
    def notify(self, message: MessageRecord, stored: PersistedRecord) -> None: ...
