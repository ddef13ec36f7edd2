"""One-shot check of an IMAP folder for messages not seen on previous runs.

Meant to be run periodically by an external scheduler (cron, systemd timer).
Settings come from the environment / .env, and any flag given here wins.
"""

from __future__ import annotations

import argparse
import sys
from typing import Any, Sequence

from loguru import logger

from imapnotify.application.use_cases.notify_new_messages import NotifyNewMessagesUseCase
from imapnotify.domain.errors import ImapNotifyError
from imapnotify.infrastructure.email.providers.imap import (
    ImapAuthenticator,
    ImapCredentials,
    ImapMailboxReader,
)
from imapnotify.infrastructure.notify import ConsoleNotifier
from imapnotify.infrastructure.settings import Settings, read_password_file
from imapnotify.infrastructure.stores import open_ledger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)

# argparse destination -> Settings field
FLAG_SETTINGS = {
    "host": "imap_host",
    "port": "imap_port",
    "user": "imap_user",
    "password_file": "imap_password_file",
    "mailbox": "imap_mailbox",
    "ledger": "ledger_backend",
    "db_host": "db_host",
    "db_port": "db_port",
    "db_user": "db_user",
    "db_pass": "db_password",
    "db_name": "db_name",
    "sqlite_path": "sqlite_path",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="imap-notify",
        description="Report messages in an IMAP folder that have not been seen before",
    )
    parser.add_argument("--host", help="IMAP host.")
    parser.add_argument("--port", type=int, help="IMAP port (default 993).")
    parser.add_argument("--user", help="IMAP username.")
    parser.add_argument("--password-file", help="File containing the IMAP password.")
    parser.add_argument("--mailbox", help="IMAP mailbox.")
    parser.add_argument("--ledger", choices=["postgres", "sqlite"], help="Ledger backend (default postgres).")
    parser.add_argument("--db-host", help="Database host (default 127.0.0.1).")
    parser.add_argument("--db-port", type=int, help="Database port (default 5432).")
    parser.add_argument("--db-user", help="Database username.")
    parser.add_argument("--db-pass", help="Database password.")
    parser.add_argument("--db-name", help="Database name.")
    parser.add_argument("--sqlite-path", help="SQLite ledger file, when --ledger sqlite.")
    parser.add_argument("--init-db", action="store_true", help="Create the ledger table if it does not exist.")
    parser.add_argument("--verbose", action="store_true", default=None, help="Toggle verbose output.")
    return parser


def settings_from_args(args: argparse.Namespace) -> Settings:
    overrides: dict[str, Any] = {
        field: getattr(args, dest)
        for dest, field in FLAG_SETTINGS.items()
        if getattr(args, dest) is not None
    }
    if args.verbose is not None:
        overrides["verbose"] = args.verbose
    return Settings(**overrides)


def configure_logging(settings: Settings) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        format=LOG_FORMAT,
        level="DEBUG" if settings.verbose else settings.log_level,
    )


def run(settings: Settings, init_db: bool = False) -> int:
    settings.validate_required()
    password = read_password_file(settings.imap_password_file)

    authenticator = ImapAuthenticator(
        ImapCredentials(
            host=settings.imap_host,
            user=settings.imap_user,
            password=password,
            port=settings.imap_port,
        ),
        timeout=settings.imap_timeout,
    )

    with authenticator.session() as client, open_ledger(settings, init_schema=init_db) as ledger:
        uc = NotifyNewMessagesUseCase(
            reader=ImapMailboxReader(client, batch_size=settings.fetch_batch_size),
            ledger=ledger,
            notifier=ConsoleNotifier(),
            folder=settings.imap_mailbox,
        )
        uc.run()

    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = settings_from_args(args)
    except ValueError as e:
        parser.print_usage(sys.stderr)
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    configure_logging(settings)

    try:
        return run(settings, init_db=args.init_db)
    except ImapNotifyError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
