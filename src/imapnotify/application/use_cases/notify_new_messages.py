"""Record and announce messages that have never been seen in a folder."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from loguru import logger

from imapnotify.application.ports.ledger import Ledger
from imapnotify.application.ports.mailbox_reader import MailboxReader
from imapnotify.application.ports.notifier import Notifier
from imapnotify.domain.entities.message_record import MessageRecord
from imapnotify.domain.identity import Outcome, resolve_identity


@dataclass
class RunSummary:
    """Count of outcomes for one run."""

    fetched: int = 0
    by_outcome: dict[Outcome, int] = field(default_factory=dict)

    def record(self, outcome: Outcome) -> None:
        self.by_outcome[outcome] = self.by_outcome.get(outcome, 0) + 1

    def count(self, outcome: Outcome) -> int:
        return self.by_outcome.get(outcome, 0)

    def __str__(self) -> str:
        return (
            f"fetched={self.fetched}, "
            f"new={self.count(Outcome.NEW)}, "
            f"seen_before={self.count(Outcome.SEEN_BEFORE)}, "
            f"ambiguous={self.count(Outcome.AMBIGUOUS)}, "
            f"missing_identity={self.count(Outcome.MISSING_IDENTITY)}"
        )


class NotifyNewMessagesUseCase:
    """Check every message in a folder against the ledger.

    Flow, per message and in fetch order:
    1. No Message-ID: warn and skip, the ledger is never consulted
    2. Look up (Message-ID, internal date) in the ledger
    3. No match: insert, then notify
    4. One match: already seen, skip
    5. Several matches: warn and skip, the ledger is left untouched

    Any ledger or notifier failure aborts the run. Inserts committed before
    the failure stay committed.

    The lookup and the insert are separate statements, so two overlapping
    runs against the same folder can both insert and notify the same message.
    """

    def __init__(
        self,
        reader: MailboxReader,
        ledger: Ledger,
        notifier: Notifier,
        folder: str,
    ) -> None:
        self.reader = reader
        self.ledger = ledger
        self.notifier = notifier
        self.folder = folder

    def run(self) -> RunSummary:
        """Fetch the folder and process every message in it."""
        messages = self.reader.fetch_messages(self.folder)
        logger.debug(f"Fetched {len(messages)} messages from {self.folder}")
        return self.process_all(messages)

    def process_all(self, messages: Iterable[MessageRecord]) -> RunSummary:
        summary = RunSummary()
        for message in messages:
            summary.fetched += 1
            summary.record(self.process(message))
        logger.info(f"Run complete for {self.folder}: {summary}")
        return summary

    def process(self, message: MessageRecord) -> Outcome:
        """Decide what to do with a single message and do it."""
        key = resolve_identity(message)
        if key is None:
            logger.warning(f"Message has no message-id. {message.describe()}")
            return Outcome.MISSING_IDENTITY

        matches = self.ledger.find_by_key(key)

        if len(matches) == 1:
            logger.debug(f"Message already seen: {message.describe()}")
            logger.debug(f"In ledger it is: {matches[0].describe()}")
            return Outcome.SEEN_BEFORE

        if len(matches) > 1:
            logger.warning(
                f"Multiple matching messages in the ledger ({len(matches)})! "
                f"{message.describe()}"
            )
            return Outcome.AMBIGUOUS

        stored = self.ledger.insert(message)
        logger.debug(f"Recorded new message as ID {stored.id}")
        self.notifier.notify(message, stored)
        return Outcome.NEW
