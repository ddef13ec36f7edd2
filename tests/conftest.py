from __future__ import annotations

import pytest
from loguru import logger


@pytest.fixture
def log_records():
    """(level, message) pairs for everything logged during the test."""
    records: list[tuple[str, str]] = []
    handler_id = logger.add(
        lambda message: records.append((message.record["level"].name, message.record["message"])),
        level="DEBUG",
    )
    yield records
    logger.remove(handler_id)
