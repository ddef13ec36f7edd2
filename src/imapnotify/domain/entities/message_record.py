from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import NamedTuple

FROM_ADDRESS_SEPARATOR = ", "


class IdentityKey(NamedTuple):
    # Compared exactly: no case folding, no timezone normalization
    message_id: str
    internal_date: datetime


@dataclass(frozen=True)
class MessageRecord:
    message_id: str
    subject: str
    senders: tuple[str, ...]
    # Date the message was received by the server, not the Date header.
    internal_date: datetime
    sequence: int | None = field(default=None, compare=False)

    @property
    def from_addresses(self) -> str:
        return FROM_ADDRESS_SEPARATOR.join(self.senders)

    def describe(self) -> str:
        return (
            f"Message-ID: {self.message_id} Subject: {self.subject} "
            f"Time: {self.internal_date} From: {self.from_addresses}"
        )


@dataclass(frozen=True)
class PersistedRecord:
    id: int
    message_id: str
    subject: str
    from_addresses: str
    internal_date: datetime
    create_time: datetime

    @property
    def key(self) -> IdentityKey:
        return IdentityKey(self.message_id, self.internal_date)

    def describe(self) -> str:
        return (
            f"ID: {self.id} Message-ID: {self.message_id} Subject: {self.subject} "
            f"Time: {self.internal_date} From: {self.from_addresses} "
            f"Create Time: {self.create_time}"
        )
