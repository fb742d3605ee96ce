"""Configuration loaded from environment variables."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Untracked migrations whose filename timestamp is older than this many days
# are reported as stale by ``validate_migrations``.
STALE_MIGRATION_DAYS = 7


class Settings(BaseSettings):
    """Settings loaded from environment variables with the OMNIFY_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="OMNIFY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    debug: bool = False

    # Persisted artifacts
    lock_file_name: str = ".omnify.lock"
    chain_file_name: str = ".omnify.chain"

    # Lock file
    driver: str = "mysql"

    # Version chain
    environment: str = "production"

    # Migration tracking
    migration_suffix: str = ".php"
    stale_migration_days: int = Field(default=STALE_MIGRATION_DAYS, ge=0)

    def lock_file_path(self, project_dir: str | Path) -> Path:
        return Path(project_dir) / self.lock_file_name

    def chain_file_path(self, project_dir: str | Path) -> Path:
        return Path(project_dir) / self.chain_file_name


def load_settings(**overrides: object) -> Settings:
    """Load settings from environment, with optional overrides for testing."""
    settings = Settings(**overrides)  # type: ignore[arg-type]

    if settings.debug:
        logger.info(
            "Loaded settings: lock=%s chain=%s driver=%s",
            settings.lock_file_name,
            settings.chain_file_name,
            settings.driver,
        )

    return settings
