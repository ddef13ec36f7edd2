"""Infrastructure layer - IMAP access, ledger storage, notification and configuration."""

from imapnotify.infrastructure.postgres_client import (
    PostgresClientWrapper,
    postgres_session,
)
from imapnotify.infrastructure.settings import Settings, read_password_file

__all__ = [
    # Settings
    "Settings",
    "read_password_file",
    # Postgres
    "PostgresClientWrapper",
    "postgres_session",
]
