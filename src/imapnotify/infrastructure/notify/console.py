"""Plain-text announcements for newly seen messages."""

from __future__ import annotations

import sys
from typing import Callable, Optional

from loguru import logger

from imapnotify.domain.entities.message_record import MessageRecord, PersistedRecord
from imapnotify.domain.errors import NotificationError
from imapnotify.infrastructure.email.headers import decode_header_value

SEPARATOR = "----------"


def _stdout_sink(text: str) -> None:
    sys.stdout.write(text + "\n")
    sys.stdout.flush()


def render_announcement(message: MessageRecord) -> list[str]:
    """Lines announcing one message: separator, subject, senders, blank."""
    lines = [SEPARATOR, f"Subject: {decode_header_value(message.subject)}"]
    lines.extend(f"From: {decode_header_value(sender)}" for sender in message.senders)
    lines.append("")
    return lines


class ConsoleNotifier:
    """Write announcements to a text sink, stdout by default."""

    def __init__(self, sink: Optional[Callable[[str], None]] = None) -> None:
        self.sink = sink or _stdout_sink

    def notify(self, message: MessageRecord, stored: PersistedRecord) -> None:
        try:
            for line in render_announcement(message):
                self.sink(line)
        except Exception as e:
            raise NotificationError(f"Unable to output message: {message.describe()}: {e}") from e
        logger.debug(f"Announced ledger ID {stored.id}")
