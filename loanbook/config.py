"""Configuration loading for the Loanbook ledger engine.

This module provides centralized configuration management:
- Load settings from environment variables and .env files
- Validate configuration using pydantic
- Provide typed access to the borrow/return policy switches
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment.

    Uses pydantic-settings for environment variable handling with
    .env file support via python-dotenv.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Loan policy
    forbid_concurrent_loans: bool = Field(
        default=False,
        description="Reject a new borrow while the borrower has any open loan",
    )
    cap_over_returns: bool = Field(
        default=True,
        description="Accept an over-return up to the amount owed instead of rejecting it",
    )

    # Catalog
    first_item_id: int = Field(
        default=1001,
        description="Identifier assigned to the first item added to the catalog",
    )

    # Logging configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log format",
    )

    # Run mode
    run_mode: Literal["cli"] = Field(
        default="cli",
        description="Run mode",
    )

    # Development
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging",
    )

    @field_validator("first_item_id")
    @classmethod
    def validate_first_item_id(cls, v: int) -> int:
        """Ensure item identifiers start positive."""
        if v <= 0:
            raise ValueError("first_item_id must be positive")
        return v


def load_settings(env_file: str | None = None) -> Settings:
    """Load application settings from environment.

    Args:
        env_file: Optional path to .env file. If not provided,
                 uses the default .env in the current directory.

    Returns:
        Validated Settings instance.

    Raises:
        ValidationError: If settings validation fails.
    """
    if env_file:
        return Settings(_env_file=env_file)  # type: ignore[call-arg]
    return Settings()


__all__ = ["Settings", "load_settings"]
