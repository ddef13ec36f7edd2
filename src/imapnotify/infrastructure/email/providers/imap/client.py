from __future__ import annotations

import queue
import threading
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from imapclient import IMAPClient
from imapclient.exceptions import IMAPClientError
from loguru import logger

from imapnotify.application.ports.mailbox_reader import MailboxReader
from imapnotify.domain.entities.message_record import MessageRecord
from imapnotify.domain.errors import FetchStreamError, FolderSelectError
from imapnotify.infrastructure.email.providers.imap.mapper import (
    FETCH_ATTRIBUTES,
    fetch_data_to_message_record,
)

DEFAULT_BATCH_SIZE = 500
DEFAULT_QUEUE_SIZE = 64


@dataclass(frozen=True)
class _Done:
    error: Optional[BaseException] = None


class FetchStream:
    """Records from a producer thread, delivered through a bounded queue.

    The producer pushes records one at a time and always finishes with a
    terminal marker carrying its completion status. Iterating drains the
    queue up to that marker; only then is the status checked, so the producer
    can never block forever on a full queue.
    """

    def __init__(
        self,
        produce: Callable[[Callable[[MessageRecord], None]], None],
        maxsize: int = DEFAULT_QUEUE_SIZE,
    ) -> None:
        self._produce = produce
        self._queue: queue.Queue[MessageRecord | _Done] = queue.Queue(maxsize=maxsize)
        self._thread = threading.Thread(target=self._run, name="imap-fetch", daemon=True)

    def _run(self) -> None:
        error: Optional[BaseException] = None
        try:
            self._produce(self._queue.put)
        except Exception as e:
            error = e
        finally:
            self._queue.put(_Done(error))

    def __iter__(self) -> Iterator[MessageRecord]:
        self._thread.start()
        while True:
            item = self._queue.get()
            if isinstance(item, _Done):
                break
            yield item
        self._thread.join()
        if item.error is not None:
            raise item.error

    def collect(self) -> list[MessageRecord]:
        """Drain the stream, attaching delivered records to any failure."""
        records: list[MessageRecord] = []
        try:
            for record in self:
                records.append(record)
        except FetchStreamError as e:
            raise FetchStreamError(str(e), partial=records) from e.__cause__
        except Exception as e:
            raise FetchStreamError(f"Problem fetching messages: {e}", partial=records) from e
        return records


class ImapMailboxReader(MailboxReader):
    """Fetch ENVELOPE and INTERNALDATE for every message in a folder.

    The client must be logged in and address messages by sequence number
    (see ImapAuthenticator). Bodies are never requested and the folder is
    opened read-only, so no flags change.
    """

    def __init__(
        self,
        client: IMAPClient,
        batch_size: int = DEFAULT_BATCH_SIZE,
        queue_size: int = DEFAULT_QUEUE_SIZE,
    ) -> None:
        self.client = client
        self.batch_size = batch_size
        self.queue_size = queue_size

    def select_folder(self, folder: str) -> int:
        """Open the folder read-only and return its message count."""
        try:
            info = self.client.select_folder(folder, readonly=True)
        except (OSError, IMAPClientError) as e:
            raise FolderSelectError(f"Unable to select mailbox: {folder}: {e}") from e

        count = int(info.get(b"EXISTS", 0))
        logger.debug(f"There are {count} messages in the mailbox.")
        return count

    def fetch_messages(self, folder: str) -> list[MessageRecord]:
        count = self.select_folder(folder)
        if count == 0:
            return []

        def produce(emit: Callable[[MessageRecord], None]) -> None:
            self._fetch_range(count, emit)

        return FetchStream(produce, maxsize=self.queue_size).collect()

    def _fetch_range(self, count: int, emit: Callable[[MessageRecord], None]) -> None:
        # Sequence numbers as selected: 1..count, ascending
        for start in range(1, count + 1, self.batch_size):
            end = min(start + self.batch_size - 1, count)
            try:
                response = self.client.fetch(f"{start}:{end}", FETCH_ATTRIBUTES)
            except (OSError, IMAPClientError) as e:
                raise FetchStreamError(f"Problem fetching messages {start}:{end}: {e}") from e

            for sequence in sorted(response):
                if not start <= sequence <= end:
                    # Unsolicited FETCH for another message, e.g. a flag change
                    logger.debug(f"Ignoring untagged FETCH for message {sequence}")
                    continue
                try:
                    record = fetch_data_to_message_record(sequence, response[sequence])
                except (ValueError, AttributeError) as e:
                    raise FetchStreamError(f"Problem fetching messages: {e}") from e
                emit(record)
