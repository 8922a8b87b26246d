"""
Centralized configuration management using Pydantic Settings.

Settings are loaded from environment variables prefixed with ``PROCMAP_``
and from an optional ``.env`` file.
"""

import logging
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BatchFailurePolicy(str, Enum):
    """
    What batch_insert does when one record fails to execute.

    CONTINUE logs the failure, carries on with the remaining records and
    commits at the end. Partial batches are committed and the caller is
    not told which rows failed.

    ABORT rolls the transaction back and re-raises the first failure.
    """

    CONTINUE = "continue"
    ABORT = "abort"


# Positional markers understood by the statement builder
VALID_PLACEHOLDERS = ("?", "%s", ":n")


class Settings(BaseSettings):
    """
    Runtime settings for the mapping engine and its default connection.

    All settings can be overridden via environment variables, e.g.
    ``PROCMAP_DATABASE_URL`` or ``PROCMAP_BATCH_FAILURE_POLICY``.
    """

    # Database Configuration
    database_url: str = Field(
        default="sqlite:///:memory:",
        description="SQLAlchemy database URL used by SqlAlchemyConnection"
    )
    echo_sql: bool = Field(
        default=False,
        description="Log every statement through SQLAlchemy's engine logger"
    )
    pool_pre_ping: bool = Field(
        default=True,
        description="Test pooled connections before handing them out"
    )

    # Statement Configuration
    placeholder: Optional[str] = Field(
        default=None,
        description=(
            "Positional marker used in generated CALL statements (?, %s or :n); "
            "unset means derive it from the connection's DB-API paramstyle"
        )
    )

    # Batch Configuration
    batch_failure_policy: BatchFailurePolicy = Field(
        default=BatchFailurePolicy.CONTINUE,
        description="How batch_insert reacts to a failing record"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Root log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_json: bool = Field(
        default=True,
        description="Emit JSON log lines instead of plain text"
    )

    model_config = SettingsConfigDict(
        env_prefix="PROCMAP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """
        Validate database URL format.

        SQLAlchemy URLs always carry a ``scheme://`` prefix; anything else
        would only fail later inside create_engine().
        """
        if not v or v.strip() == "":
            raise ValueError("PROCMAP_DATABASE_URL is required and cannot be empty")

        if "://" not in v:
            raise ValueError(
                f"PROCMAP_DATABASE_URL must look like dialect+driver://... "
                f"Got: {v[:20]}..."
            )
        return v

    @field_validator("placeholder")
    @classmethod
    def validate_placeholder(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in VALID_PLACEHOLDERS:
            raise ValueError(
                f"PROCMAP_PLACEHOLDER must be one of: {', '.join(VALID_PLACEHOLDERS)}. "
                f"Got: {v!r}"
            )
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize to upper case and reject unknown level names."""
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level


# Global settings instance
# Repositories fall back to this when no Settings is passed in
settings = Settings()
