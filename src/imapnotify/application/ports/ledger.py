from __future__ import annotations
from typing import Protocol
from imapnotify.domain.entities.message_record import IdentityKey, MessageRecord, PersistedRecord

class Ledger(Protocol):
    def find_by_key(self, key: IdentityKey) -> list[PersistedRecord]: ...
    def insert(self, message: MessageRecord) -> PersistedRecord: ...
