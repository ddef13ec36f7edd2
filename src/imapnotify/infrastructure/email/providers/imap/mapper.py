from __future__ import annotations
from datetime import datetime
from typing import Any, Mapping, Optional

from imapnotify.domain.entities.message_record import MessageRecord

ENVELOPE = b"ENVELOPE"
INTERNALDATE = b"INTERNALDATE"
FETCH_ATTRIBUTES = [ENVELOPE, INTERNALDATE]


def _as_text(value: Optional[bytes | str]) -> str:
    # Envelope parts arrive as bytes, or None when the server sends NIL.
    # Raw 8-bit text that is not UTF-8 is read as latin-1, which maps every
    # byte to one character and can be encoded back to the original bytes.
    if value is None:
        return ""
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            return value.decode("latin-1")
    return value


def format_address(address: Any) -> str:
    """'Personal Name <mailbox@host>', keeping empty parts as empty strings."""
    return f"{_as_text(address.name)} <{_as_text(address.mailbox)}@{_as_text(address.host)}>"


def fetch_data_to_message_record(sequence: int, data: Mapping[bytes, Any]) -> MessageRecord:
    envelope = data.get(ENVELOPE)
    internal_date = data.get(INTERNALDATE)
    if envelope is None or not isinstance(internal_date, datetime):
        raise ValueError(f"Message {sequence} is missing ENVELOPE or INTERNALDATE")

    senders = tuple(format_address(a) for a in (envelope.from_ or ()))

    return MessageRecord(
        message_id=_as_text(envelope.message_id),
        subject=_as_text(envelope.subject),
        senders=senders,
        internal_date=internal_date,
        sequence=sequence,
    )
