from __future__ import annotations

from datetime import datetime, timezone
from itertools import count

from imapclient.exceptions import IMAPClientError
from imapclient.response_types import Address, Envelope

from imapnotify.domain.entities.message_record import IdentityKey, MessageRecord, PersistedRecord

JAN_1 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_message(
    *,
    message_id: str = "<abc@mail>",
    subject: str = "=?UTF-8?Q?Hi?=",
    senders: tuple[str, ...] = ("Alice <alice@example.com>",),
    internal_date: datetime = JAN_1,
) -> MessageRecord:
    return MessageRecord(
        message_id=message_id,
        subject=subject,
        senders=senders,
        internal_date=internal_date,
    )


def make_fetch_data(
    *,
    message_id: bytes | None = b"<abc@mail>",
    subject: bytes | None = b"=?UTF-8?Q?Hi?=",
    senders: tuple[tuple[bytes | None, bytes | None, bytes | None], ...] = (
        (b"Alice", b"alice", b"example.com"),
    ),
    internal_date: datetime = JAN_1,
) -> dict:
    envelope = Envelope(
        date=None,
        subject=subject,
        from_=tuple(Address(name=n, route=None, mailbox=m, host=h) for n, m, h in senders),
        sender=None,
        reply_to=None,
        to=None,
        cc=None,
        bcc=None,
        in_reply_to=None,
        message_id=message_id,
    )
    return {b"ENVELOPE": envelope, b"INTERNALDATE": internal_date}


class InMemoryLedger:
    """Ledger double with the same no-uniqueness semantics as the real tables."""

    def __init__(self, rows: list[PersistedRecord] | None = None) -> None:
        self.rows: list[PersistedRecord] = list(rows or [])
        self.lookups: list[IdentityKey] = []
        self.inserted: list[MessageRecord] = []
        self._ids = count(len(self.rows) + 1)

    def find_by_key(self, key: IdentityKey) -> list[PersistedRecord]:
        self.lookups.append(key)
        return [row for row in self.rows if row.key == key]

    def insert(self, message: MessageRecord) -> PersistedRecord:
        self.inserted.append(message)
        row = PersistedRecord(
            id=next(self._ids),
            message_id=message.message_id,
            subject=message.subject,
            from_addresses=message.from_addresses,
            internal_date=message.internal_date,
            create_time=datetime.now(timezone.utc),
        )
        self.rows.append(row)
        return row

    def add_row(self, message: MessageRecord) -> PersistedRecord:
        row = self.insert(message)
        self.inserted.pop()
        return row


class RecordingNotifier:
    def __init__(self) -> None:
        self.notified: list[tuple[MessageRecord, PersistedRecord]] = []

    def notify(self, message: MessageRecord, stored: PersistedRecord) -> None:
        self.notified.append((message, stored))


class StaticReader:
    def __init__(self, messages: list[MessageRecord]) -> None:
        self.messages = messages
        self.folders: list[str] = []

    def fetch_messages(self, folder: str) -> list[MessageRecord]:
        self.folders.append(folder)
        return list(self.messages)


class FakeImapClient:
    """Answers SELECT and FETCH by sequence number from canned fetch data."""

    def __init__(
        self,
        messages: dict[int, dict] | None = None,
        *,
        select_error: Exception | None = None,
        fail_on_fetch: int | None = None,
        unsolicited: dict[int, dict] | None = None,
    ) -> None:
        self.messages = messages or {}
        self.unsolicited = unsolicited or {}
        self.select_error = select_error
        self.fail_on_fetch = fail_on_fetch
        self.selected: list[tuple[str, bool]] = []
        self.fetches: list[tuple[str, list]] = []
        self.logged_out = False

    def select_folder(self, folder: str, readonly: bool = False) -> dict:
        if self.select_error is not None:
            raise self.select_error
        self.selected.append((folder, readonly))
        return {b"EXISTS": len(self.messages), b"FLAGS": (b"\\Seen",)}

    def fetch(self, messages: str, data: list) -> dict:
        self.fetches.append((messages, list(data)))
        if self.fail_on_fetch is not None and len(self.fetches) >= self.fail_on_fetch:
            raise IMAPClientError("connection reset during FETCH")
        start, end = (int(x) for x in messages.split(":"))
        # Servers answer in any order; the reader must sort
        response = {seq: self.messages[seq] for seq in reversed(range(start, end + 1))}
        # Untagged FETCH data for other messages rides along in the same response
        response.update(self.unsolicited)
        return response

    def logout(self) -> None:
        self.logged_out = True
