"""Shared settings loaded from environment / .env file."""

from __future__ import annotations

import logging

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration for actionmap.

    Values are read from ``ACTIONMAP_``-prefixed environment variables and
    from a ``.env`` file in the working directory.
    """

    model_config = SettingsConfigDict(
        env_prefix="ACTIONMAP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"

    # Loader limits
    max_document_size: int = 5_000_000  # characters
    max_node_count: int = 50_000


def configure_logging(settings: Settings | None = None) -> None:
    """Apply ``settings.log_level`` to the root logger."""
    settings = settings or Settings()
    logging.basicConfig(level=settings.log_level.upper())
    logging.getLogger("actionmap").debug("Logging configured at %s", settings.log_level)
