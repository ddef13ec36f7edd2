"""Application settings using Pydantic Settings for configuration management."""

from pathlib import Path
from typing import Literal

from psycopg.conninfo import make_conninfo
from pydantic import Field, SecretStr, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from imapnotify.domain.errors import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Application
    verbose: bool = False
    log_level: str = "INFO"

    # IMAP
    imap_host: str = ""
    imap_port: int = 993
    imap_user: str = ""
    imap_password_file: str = ""
    imap_mailbox: str = ""
    imap_timeout: float = 30.0
    fetch_batch_size: int = Field(default=500, gt=0)

    # Ledger
    ledger_backend: Literal["postgres", "sqlite"] = "postgres"
    db_host: str = "127.0.0.1"
    db_port: int = 5432
    db_user: str = ""
    db_password: SecretStr = Field(default=SecretStr(""))
    db_name: str = ""
    db_connect_timeout: int = 10
    sqlite_path: str = "imap_notify.db"

    @computed_field
    @property
    def postgres_dsn(self) -> str:
        """Construct PostgreSQL connection string."""
        return make_conninfo(
            host=self.db_host,
            port=self.db_port,
            user=self.db_user,
            password=self.db_password.get_secret_value(),
            dbname=self.db_name,
            connect_timeout=self.db_connect_timeout,
        )

    def validate_required(self) -> None:
        """Raise ConfigurationError naming every required value that is unset."""
        required = {
            "IMAP host": self.imap_host,
            "IMAP username": self.imap_user,
            "IMAP password file": self.imap_password_file,
            "IMAP mailbox": self.imap_mailbox,
        }
        if self.ledger_backend == "postgres":
            required.update(
                {
                    "database host": self.db_host,
                    "database username": self.db_user,
                    "database password": self.db_password.get_secret_value(),
                    "database name": self.db_name,
                }
            )
        else:
            required["SQLite path"] = self.sqlite_path

        missing = [name for name, value in required.items() if not value]
        if missing:
            raise ConfigurationError(f"You must provide: {', '.join(missing)}")


def read_password_file(path: str | Path) -> str:
    """Read a password from a file, ignoring surrounding whitespace."""
    try:
        contents = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Unable to retrieve password from file: {path}: {e}") from e

    password = contents.strip()
    if not password:
        raise ConfigurationError(f"Unable to retrieve password from file: {path}: No contents found")
    return password
