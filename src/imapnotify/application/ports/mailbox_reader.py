from __future__ import annotations

from imapnotify.domain.entities.message_record import MessageRecord


class MailboxReader:
    def fetch_messages(self, folder: str) -> list[MessageRecord]:
        # Read-only: inspecting a folder must never change message flags
        raise NotImplementedError
