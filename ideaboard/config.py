"""
Idea Board – Application configuration.
Reads environment variables from a .env file via pydantic-settings.
"""

import logging
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration loaded from environment / .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # ── App ──
    APP_NAME: str = "Idea Board"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # ── Database ──
    DATABASE_URL: str = "sqlite+aiosqlite:///./ideaboard.db"

    # ── Voting & lifecycle ──
    AUTO_APPROVAL_THRESHOLD: int = 3
    HIGH_PRIORITY_VOTE_THRESHOLD: int = 5
    VOTE_UPDATE_MAX_RETRIES: int = 5

    # ── Side effects (messaging, points) ──
    SIDE_EFFECT_MAX_ATTEMPTS: int = 2
    SIDE_EFFECT_RETRY_WAIT: float = 0.2

    # ── Points ──
    POINTS_IDEA_SUBMISSION: int = 3
    POINTS_VOTE_GIVEN: int = 1


settings = Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Set up root logging once at startup."""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
