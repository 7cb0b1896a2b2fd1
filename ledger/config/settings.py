"""
Configuration Management for Personal Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
File locations, the transaction file layout and logging are all
validated once at startup.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TransactionFileFormat(str, Enum):
    """
    Layout of the transaction file.

    MULTI_USER lines start with the owning username.
    SINGLE_USER is the legacy layout without a username column.
    """
    MULTI_USER = "multi_user"
    SINGLE_USER = "single_user"


class LedgerSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from LEDGER_* environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Storage
    data_dir: Path = Field(
        default=Path("."),
        description="Directory holding the transaction and user files"
    )
    transactions_filename: str = Field(
        default="transactions.csv",
        min_length=1,
        description="Name of the comma-delimited transaction file"
    )
    users_filename: str = Field(
        default="users.dat",
        min_length=1,
        description="Name of the binary user credential file"
    )
    transaction_file_format: TransactionFileFormat = Field(
        default=TransactionFileFormat.MULTI_USER,
        description="Whether transaction lines carry a username column"
    )
    atomic_writes: bool = Field(
        default=True,
        description="Write to a temp file and rename it into place on save"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum log level"
    )
    log_format: str = Field(
        default="json",
        pattern="^(json|console)$",
        description="Log renderer: json or console"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def transactions_path(self) -> Path:
        return self.data_dir / self.transactions_filename

    @property
    def users_path(self) -> Path:
        return self.data_dir / self.users_filename


@lru_cache()
def get_settings() -> LedgerSettings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return LedgerSettings()
